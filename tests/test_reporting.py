import json
from pathlib import Path

import pytest

from license_finder.errors import EmptyInputError, InvalidInputError, ReportError
from license_finder.reporting import (
    build_license_summary,
    create_module_node,
    render_csv,
    render_json,
    render_report,
    render_standard,
    write_report,
)
from license_finder.types import LicenseSources, ModuleLicenseRecord, PackageSource


def _module(name: str, version: str, package=(), license_files=(), readme=()) -> ModuleLicenseRecord:
    sources = LicenseSources(package=PackageSource(list(package)))
    if license_files:
        sources.license.add_file(Path(name) / "LICENSE", license_files)
    if readme:
        sources.readme.add_file(Path(name) / "README.md", readme)
    return ModuleLicenseRecord(name=name, version=version, license_sources=sources)


@pytest.fixture
def modules():
    return [
        _module("alpha", "1.0.0", package=["MIT"]),
        _module("beta", "2.0.0", package=["BSD"], license_files=["BSD"], readme=["MIT"]),
    ]


def test_render_rejects_empty_input():
    result = render_standard([], "simple")
    assert not result.ok
    assert result.output is None
    assert isinstance(result.error, EmptyInputError)


def test_render_rejects_non_sequence_input(modules):
    result = render_standard({"alpha": modules[0]})
    assert isinstance(result.error, InvalidInputError)
    assert result.output is None
    with pytest.raises(ReportError):
        result.unwrap()


def test_module_without_sources_renders_label_only():
    result = render_standard([ModuleLicenseRecord(name="mystery", version="0.1.0")], None)

    assert result.ok
    assert result.output == "mystery@0.1.0 [license(s): ]"
    assert "package.json:" not in result.output
    assert "license files:" not in result.output
    assert "readme files:" not in result.output


def test_module_node_lists_sources_in_fixed_order(modules):
    node = create_module_node(modules[1])
    assert node.label == "beta@2.0.0 [license(s): BSD, MIT]"
    assert node.nodes == ["package.json:  BSD", "license files: BSD", "readme files: MIT"]


def test_standard_report_without_summary(modules):
    output = render_standard(modules).unwrap()
    assert "\n\n" not in output
    assert output.splitlines() == [
        "alpha@1.0.0 [license(s): MIT]",
        "└── package.json:  MIT",
        "beta@2.0.0 [license(s): BSD, MIT]",
        "├── package.json:  BSD",
        "├── license files: BSD",
        "└── readme files: MIT",
    ]
    assert "LICENSES" not in render_standard(modules, "unknown").unwrap()


def test_simple_summary_lists_sorted_licenses(modules):
    output = render_standard(modules, "simple").unwrap()
    assert output.splitlines()[-1] == "LICENSES: BSD, MIT"


def test_detail_summary_groups_modules_by_license(modules):
    output = render_standard(modules, "detail").unwrap()
    lines = output.splitlines()
    summary = lines[lines.index("LICENSES:"):]

    assert summary == [
        "LICENSES:",
        "├── MIT",
        "│   ├── alpha@1.0.0",
        "│   └── beta@2.0.0",
        "└── BSD",
        "    └── beta@2.0.0",
    ]


def test_build_license_summary_keeps_input_order(modules):
    assert build_license_summary(modules) == {
        "MIT": ["alpha@1.0.0", "beta@2.0.0"],
        "BSD": ["beta@2.0.0"],
    }


def test_render_json_includes_sources_and_summary(modules):
    payload = json.loads(render_json(modules, "detail").unwrap())
    assert payload["modules"][1]["licenses"] == ["BSD", "MIT"]
    assert payload["modules"][1]["sources"]["license"]["files"][0]["licenses"] == ["BSD"]
    assert payload["licenses"]["MIT"] == ["alpha@1.0.0", "beta@2.0.0"]

    simple = json.loads(render_json(modules, "simple").unwrap())
    assert simple["licenses"] == ["BSD", "MIT"]


def test_render_csv_writes_one_row_per_module(modules):
    lines = render_csv(modules).unwrap().splitlines()
    assert lines[0].startswith("name,version")
    assert lines[2] == 'beta,2.0.0,,no,"BSD, MIT",BSD,BSD,MIT'
    assert isinstance(render_csv([]).error, EmptyInputError)


def test_render_report_rejects_unknown_format(modules):
    with pytest.raises(ValueError):
        render_report(modules, "html")


def test_write_report_only_writes_successful_output(tmp_path: Path, modules):
    destination = tmp_path / "out" / "licenses.txt"
    result = write_report(modules, "standard", destination, "simple")
    assert destination.read_text() == result.output

    missing = tmp_path / "empty.txt"
    failed = write_report([], "standard", missing)
    assert not failed.ok
    assert not missing.exists()
