"""Generator options passed in by the caller."""

from __future__ import annotations

from dataclasses import dataclass

TARGETS = ("python", "kotlin")


@dataclass(frozen=True)
class GeneratorConfig:
    """Options for one compilation run.

    Attributes:
        include_response_param: Append a trailing ``response`` handle
            parameter to every method, for frameworks where handlers write
            to the output channel themselves.
        generate_interface: Emit the container as an abstract contract
            (interface / Protocol) rather than a concrete placeholder class.
        target: Output language; picks the type resolver and the template.
        interface_name: Name of the container; derived from ``info.title``
            when not given.
        package: Package line for targets that have one (Kotlin).
    """

    include_response_param: bool = False
    generate_interface: bool = True
    target: str = "python"
    interface_name: str | None = None
    package: str | None = None

    def __post_init__(self) -> None:
        if self.target not in TARGETS:
            raise ValueError(f"unknown target {self.target!r}; expected one of {', '.join(TARGETS)}")
