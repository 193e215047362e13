import base64
import hashlib
import pytest
from unittest.mock import patch

from main import build_parser, main


class TestMain:
    @pytest.fixture
    def nupkg_file(self, tmp_path):
        path = tmp_path / "download.tmp"
        path.write_bytes(b"nupkg content")
        return path

    @pytest.fixture
    def packages_dir(self, tmp_path):
        return tmp_path / "packages"

    def test_hash_writes_sidecar(self, nupkg_file, packages_dir, capsys):
        exit_code = main([
            "--packages-dir", str(packages_dir),
            "hash", "HelloNuget", "1.0.2", str(nupkg_file)
        ])

        expected = base64.b64encode(hashlib.sha512(b"nupkg content").digest()).decode("ascii")
        hash_path = packages_dir / "hellonuget" / "1.0.2" / "hellonuget.1.0.2.nupkg.sha512"

        assert exit_code == 0
        assert hash_path.read_text() == expected
        out = capsys.readouterr().out.splitlines()
        assert out == [str(hash_path), expected]

    def test_hash_with_sha256(self, nupkg_file, packages_dir):
        main([
            "--packages-dir", str(packages_dir), "--hash-algorithm", "sha256",
            "hash", "pkg", "1.0.0", str(nupkg_file)
        ])

        hash_path = packages_dir / "pkg" / "1.0.0" / "pkg.1.0.0.nupkg.sha512"
        assert hash_path.read_text() == base64.b64encode(hashlib.sha256(b"nupkg content").digest()).decode("ascii")

    def test_unsupported_algorithm(self, nupkg_file, packages_dir, capsys):
        exit_code = main([
            "--packages-dir", str(packages_dir), "--hash-algorithm", "MD5",
            "hash", "pkg", "1.0.0", str(nupkg_file)
        ])

        assert exit_code == 1
        assert "MD5" in capsys.readouterr().err

    def test_verify(self, nupkg_file, packages_dir, capsys):
        main(["--packages-dir", str(packages_dir), "hash", "pkg", "1.0.0", str(nupkg_file)])
        capsys.readouterr()

        assert main(["--packages-dir", str(packages_dir), "verify", "pkg", "1.0.0"]) == 0
        assert capsys.readouterr().out.strip() == "valid"

        (packages_dir / "pkg" / "1.0.0" / "pkg.1.0.0.nupkg").write_bytes(b"tampered")

        assert main(["--packages-dir", str(packages_dir), "verify", "pkg", "1.0.0"]) == 1
        assert capsys.readouterr().out.strip() == "invalid"

    def test_verify_missing_package(self, packages_dir):
        assert main(["--packages-dir", str(packages_dir), "verify", "pkg", "1.0.0"]) == 2

    def test_paths(self, capsys):
        exit_code = main(["--packages-dir", "/packages", "paths", "HelloNuget", "1.0.2"])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "hash_file: /packages/hellonuget/1.0.2/hellonuget.1.0.2.nupkg.sha512" in out
        assert "manifest_file: /packages/hellonuget/1.0.2/hellonuget.nuspec" in out
        assert "download_marker: /packages/hellonuget/hellonuget.packagedownload.marker" in out

    def test_paths_without_lowercase(self, capsys):
        main(["--packages-dir", "/packages", "--no-lowercase", "paths", "HelloNuget", "1.0.2"])

        assert "install_path: /packages/HelloNuget/1.0.2" in capsys.readouterr().out

    def test_paths_blank_id(self, capsys):
        assert main(["--packages-dir", "/packages", "paths", " ", "1.0.2"]) == 1
        assert "package_id" in capsys.readouterr().err

    @patch("main.uvicorn.run")
    def test_serve_uses_port_in_base_url(self, mock_run, packages_dir):
        exit_code = main(["--packages-dir", str(packages_dir), "serve", "9000"])

        assert exit_code == 0
        mock_run.assert_called_once()
        assert mock_run.call_args.kwargs == {"host": "0.0.0.0", "port": 9000}

        from interfaces import api
        assert api.config.base_url == "http://localhost:9000"

    def test_command_is_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--packages-dir", "/packages"])
