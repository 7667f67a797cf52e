import pytest

from asdf_vals import cli
from asdf_vals.exceptions import DownloadFailed, InstallationFailed, NetworkError

ASDF_ENV = (
    "ASDF_INSTALL_TYPE",
    "ASDF_INSTALL_VERSION",
    "ASDF_INSTALL_PATH",
    "ASDF_DOWNLOAD_PATH",
    "ASDF_VALS_DEBUG",
    "ASDF_VALS_MAX_RETRIES",
    "ASDF_VALS_RETRY_DELAY",
    "GITHUB_API_TOKEN",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ASDF_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.mark.unit
def test_list_all_prints_space_separated(mocker, capsys):
    catalog = mocker.patch("asdf_vals.cli.VersionCatalog")
    catalog.return_value.list_versions.return_value = ["0.1.0", "0.2.0", "0.10.0"]

    assert cli.main(["list-all"]) == 0

    assert capsys.readouterr().out == "0.1.0 0.2.0 0.10.0\n"


@pytest.mark.unit
def test_list_all_failure_exits_non_zero(mocker, capsys):
    catalog = mocker.patch("asdf_vals.cli.VersionCatalog")
    catalog.return_value.list_versions.side_effect = NetworkError(
        "Failed to list tags", url="https://github.com/helmfile/vals"
    )

    assert cli.main(["list-all"]) == 1

    assert capsys.readouterr().out == ""


@pytest.mark.unit
def test_latest_stable(mocker, capsys):
    catalog = mocker.patch("asdf_vals.cli.VersionCatalog")
    catalog.return_value.latest_stable.return_value = "0.37.0"

    assert cli.main(["latest-stable", "0.3"]) == 0

    catalog.return_value.latest_stable.assert_called_once_with("0.3")
    assert capsys.readouterr().out == "0.37.0\n"


@pytest.mark.unit
def test_latest_stable_without_match(mocker, capsys):
    catalog = mocker.patch("asdf_vals.cli.VersionCatalog")
    catalog.return_value.latest_stable.return_value = None

    assert cli.main(["latest-stable"]) == 1
    assert capsys.readouterr().out == ""


@pytest.mark.unit
def test_download_reads_asdf_environment(mocker, monkeypatch, tmp_path):
    monkeypatch.setenv("ASDF_INSTALL_VERSION", "0.37.0")
    monkeypatch.setenv("ASDF_DOWNLOAD_PATH", str(tmp_path))
    fetcher_cls = mocker.patch("asdf_vals.cli.ReleaseFetcher")

    assert cli.main(["download"]) == 0

    fetcher = fetcher_cls.return_value
    fetcher.download_and_extract.assert_called_once_with("0.37.0", str(tmp_path))
    fetcher.client.close.assert_called_once()


@pytest.mark.unit
def test_download_failure_closes_client(mocker, tmp_path):
    fetcher_cls = mocker.patch("asdf_vals.cli.ReleaseFetcher")
    fetcher = fetcher_cls.return_value
    fetcher.download_and_extract.side_effect = DownloadFailed(
        "https://example.invalid/vals.tar.gz", retry_count=3
    )

    rc = cli.main(["download", "--version", "0.37.0", "--download-path", str(tmp_path)])

    assert rc == 1
    fetcher.client.close.assert_called_once()


@pytest.mark.unit
def test_install_dispatch(mocker, tmp_path):
    installer_cls = mocker.patch("asdf_vals.cli.Installer")

    rc = cli.main(
        [
            "install",
            "--install-type",
            "version",
            "--version",
            "0.37.0",
            "--install-path",
            str(tmp_path / "install"),
            "--download-path",
            str(tmp_path / "download"),
        ]
    )

    assert rc == 0
    config, download_path = installer_cls.call_args.args
    assert download_path == str(tmp_path / "download")
    installer_cls.return_value.install.assert_called_once_with(
        "version", "0.37.0", str(tmp_path / "install")
    )


@pytest.mark.unit
def test_install_failure_exits_non_zero(mocker, monkeypatch, tmp_path):
    for name, value in {
        "ASDF_INSTALL_TYPE": "version",
        "ASDF_INSTALL_VERSION": "0.37.0",
        "ASDF_INSTALL_PATH": str(tmp_path / "install"),
        "ASDF_DOWNLOAD_PATH": str(tmp_path / "download"),
    }.items():
        monkeypatch.setenv(name, value)
    installer_cls = mocker.patch("asdf_vals.cli.Installer")
    installer_cls.return_value.install.side_effect = InstallationFailed("boom")

    assert cli.main(["install"]) == 1


@pytest.mark.unit
@pytest.mark.parametrize("argv", [["download"], ["install", "--version", "0.37.0"]])
def test_missing_required_values_is_usage_error(argv):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)

    assert excinfo.value.code == 2


@pytest.mark.unit
def test_unknown_command_is_usage_error():
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["upgrade"])

    assert excinfo.value.code == 2


@pytest.mark.unit
def test_debug_flag_enables_debug_logging(mocker, monkeypatch):
    monkeypatch.setenv("ASDF_VALS_DEBUG", "1")
    configure = mocker.patch("asdf_vals.cli.log_utils.configure_logging")
    catalog = mocker.patch("asdf_vals.cli.VersionCatalog")
    catalog.return_value.list_versions.return_value = []

    assert cli.main(["list-all"]) == 0

    configure.assert_called_once_with(True)
