"""Tests for the python -m apistub entry point."""

from pathlib import Path

import yaml

from apistub.__main__ import main

PETSTORE_PATH = Path(__file__).parent / "fixtures" / "petstore.yaml"


class TestMain:
    def test_stdout(self, capsys):
        assert main([str(PETSTORE_PATH)]) == 0
        out = capsys.readouterr().out
        assert "class PetStoreApi(Protocol):" in out

    def test_output_file(self, tmp_path, capsys):
        out_file = tmp_path / "PetsApi.kt"
        code = main([
            str(PETSTORE_PATH), "-o", str(out_file), "--target", "kotlin",
            "--name", "PetsApi", "--response-param", "--concrete",
        ])
        assert code == 0
        text = out_file.read_text()
        assert "abstract class PetsApi {" in text
        assert "response: HttpServletResponse," in text
        assert "Generated" in capsys.readouterr().out

    def test_error_exit_code(self, tmp_path, capsys):
        spec_file = tmp_path / "bad.yaml"
        spec_file.write_text(yaml.safe_dump({"paths": {"/a": {"get": {"responses": {}}}}}))
        assert main([str(spec_file)]) == 1
        err = capsys.readouterr().err
        assert "GET /a" in err
        assert "operationId" in err
