"""Tests for packager command construction."""

from __future__ import annotations

from pathlib import Path

from respack.build import LoggingBuildHost
from respack.manifest.document import ManifestDocument
from respack.packager.command import backing_path, build_command, prepare_manifest
from respack.packager.identity_map import AssemblyIdentityMap
from tests.test_helpers.manifests import make_request, write_manifest


def _mkdirs(root: Path, *names: str) -> None:
    for name in names:
        (root / name).mkdir(parents=True, exist_ok=True)


def test_argument_order(project: Path, host: LoggingBuildHost) -> None:
    _mkdirs(project, "extra1", "extra2", "lib1/res", "lib2", "assets")
    request = make_request(
        project,
        resource_output_file="out/r.apk",
        additional_resource_directories=("extra1", "missing", "extra2\\"),
        additional_android_resource_paths=("lib1", "lib2"),
        library_project_jars=("a.jar",),
        asset_directory="assets",
        uncompressed_file_extensions=".dat;.bin,.raw",
        extra_packages="com.x",
        explicit_crunch=True,
        resource_symbols_text_file_directory="sym",
        extra_args="--min-sdk-version 21",
        api_level="30",
        verbose=True,
        non_constant_id=True,
        package_name="Com.Example.App",
    )
    manifest = project / "AndroidManifest.xml"
    args = build_command(
        manifest, None, request.output_path_for(None), request, host=host
    )
    assert args == (
        "package",
        "-v",
        "--non-constant-id",
        "-f",
        "-m",
        "-M",
        str(project / "manifest" / "AndroidManifest.xml"),
        "-J",
        str(project / "gen"),
        "--custom-package",
        "com.example.app",
        "-F",
        str(project / "out" / "r.apk.bk"),
        "-S",
        str(project / "res"),
        "-S",
        str(project / "extra1"),
        "-S",
        str(project / "extra2"),
        "-S",
        str(project / "lib1" / "res"),
        "-j",
        "a.jar",
        "-I",
        "android.jar",
        "-A",
        str(project / "assets"),
        "-0",
        ".dat",
        "-0",
        ".bin",
        "-0",
        ".raw",
        "--extra-packages",
        "com.x",
        "--no-crunch",
        "--auto-add-overlay",
        "--output-text-symbols",
        "sym",
        "--min-sdk-version",
        "21",
        "--max-res-version",
        "30",
    )
    assert (project / "gen").is_dir()


def test_minimal_command(project: Path, host: LoggingBuildHost) -> None:
    request = make_request(project, resource_output_file=None, use_latest_platform_sdk=True, api_level="30")
    args = build_command(project / "AndroidManifest.xml", None, None, request, host=host)
    assert args is not None
    assert "-F" not in args
    assert "--max-res-version" not in args
    assert "-v" not in args
    assert args[-1] == "--auto-add-overlay"


def test_primary_resource_directory_leads(project: Path, host: LoggingBuildHost) -> None:
    _mkdirs(project, "overlay")
    request = make_request(project, additional_resource_directories=("overlay",))
    args = build_command(project / "AndroidManifest.xml", None, None, request, host=host)
    assert args is not None
    dirs = [args[index + 1] for index, arg in enumerate(args) if arg == "-S"]
    assert dirs == [str(project / "res"), str(project / "overlay")]


def test_extra_args_expand_library_imports(project: Path, host: LoggingBuildHost) -> None:
    identity = project / "map.cache"
    identity.write_text("Other\nFoo\n", encoding="utf-8")
    request = make_request(
        project,
        extra_args="-S ${library.imports:Foo}res",
        output_import_directory="lp",
        use_short_file_names=True,
    )
    args = build_command(
        project / "AndroidManifest.xml",
        None,
        None,
        request,
        host=host,
        identity_map=AssemblyIdentityMap.load(identity),
    )
    assert args is not None
    assert args[-1].startswith("lp")
    assert "${" not in " ".join(args)
    assert "/1/" in args[-1].replace("\\", "/")


def test_abi_manifest_gets_abi_version_code(project: Path, host: LoggingBuildHost) -> None:
    request = make_request(project, application_name="MyApp")
    target = prepare_manifest(project / "AndroidManifest.xml", "arm64-v8a", request, host=host)
    assert target == project / "arm64-v8a" / "AndroidManifest.xml"
    document = ManifestDocument.load(target)
    assert document.version_code == str(7 | (3 << 16))
    assert not host.has_logged_errors


def test_invalid_version_code_aborts(tmp_path: Path, host: LoggingBuildHost) -> None:
    write_manifest(tmp_path / "AndroidManifest.xml", version_code="abc")
    request = make_request(tmp_path, version_code_pattern="{abi}{versionCode:D5}")
    args = build_command(
        tmp_path / "AndroidManifest.xml", "x86", None, request, host=host
    )
    assert args is None
    records = host.diagnostics.snapshot()
    assert [record.code for record in records if record.is_error] == ["XA0003"]
    assert records[-1].file == str(tmp_path / "AndroidManifest.xml")


def test_out_of_range_version_code_aborts(tmp_path: Path, host: LoggingBuildHost) -> None:
    write_manifest(tmp_path / "AndroidManifest.xml", version_code="2100000001")
    request = make_request(tmp_path)
    args = build_command(tmp_path / "AndroidManifest.xml", None, None, request, host=host)
    assert args is None
    assert [record.code for record in host.diagnostics.snapshot()] == ["XA0004"]


def test_unparsable_manifest_aborts(tmp_path: Path, host: LoggingBuildHost) -> None:
    manifest = tmp_path / "AndroidManifest.xml"
    manifest.write_text("<manifest", encoding="utf-8")
    request = make_request(tmp_path)
    assert build_command(manifest, None, None, request, host=host) is None
    assert [record.code for record in host.diagnostics.snapshot()] == ["APT1064"]


def test_backing_path_appends_suffix(tmp_path: Path) -> None:
    assert backing_path(tmp_path / "r.apk") == tmp_path / "r.apk.bk"
