"""
Package Assembler (packager.py)

End-to-end packaging of component trees built in tmp_path.
"""

import json
import logging

import pytest
import rcssmin

import ocpack
from ocpack import ComponentPackager, PackagerConfig, PackagingStage
from ocpack.faults import (
    ComponentNameInvalidFault,
    Fault,
    LocalScriptNotAllowedFault,
    ManifestFieldMissingFault,
    MissingFileFault,
    RequireNotFoundFault,
    UnsupportedTemplateTypeFault,
)
from ocpack.hashing import hash_string
from ocpack.packager import find_components, package_component, package_many

from conftest import DATA_PROVIDER, failing_require, render


def output_manifest(component):
    return json.loads((component / "_package" / "package.json").read_text())


# ============================================================================
# Happy path
# ============================================================================

class TestPackage:

    def test_output_layout(self, hello_component):
        ComponentPackager().package(hello_component)
        out = hello_component / "_package"
        assert sorted(p.relative_to(out).as_posix() for p in out.rglob("*") if p.is_file()) == [
            "css/site.css",
            "css/vendor/reset.css",
            "img/logo.png",
            "package.json",
            "server.py",
            "template.py",
        ]

    def test_manifest_rewritten(self, hello_component):
        result = ComponentPackager().package(hello_component)
        assert result == output_manifest(hello_component)

        files = result["oc"]["files"]
        assert files["template"]["type"] == "jinja2"
        assert files["template"]["src"] == "template.py"
        assert files["dataProvider"]["type"] == "python"
        assert files["dataProvider"]["src"] == "server.py"
        assert files["static"] == ["img", "css"]
        assert "data" not in files
        assert result["oc"]["version"] == ocpack.__version__
        assert result["name"] == "hello-world"
        assert result["version"] == "1.0.0"

    def test_original_sources_not_referenced(self, make_component):
        component = make_component(
            template_src="views/index.html",
            files={"client.js": "x"},
            oc={"minify": True},
        )
        manifest = json.loads((component / "package.json").read_text())
        manifest["oc"]["files"]["client"] = "client.js"
        (component / "package.json").write_text(json.dumps(manifest))

        files = ComponentPackager().package(component)["oc"]["files"]
        assert "client" not in files
        assert "views/index.html" not in json.dumps(files)

    def test_template_hash_matches_artifact(self, hello_component):
        result = ComponentPackager().package(hello_component)
        out = hello_component / "_package"
        hash_key = result["oc"]["files"]["template"]["hashKey"]
        html = render((out / "template.py").read_text(), hash_key, {"name": "World"})
        assert html == "<p>Hello World</p>"

    def test_data_provider_hash_matches_file(self, hello_component):
        result = ComponentPackager().package(hello_component)
        bundled = (hello_component / "_package" / "server.py").read_text()
        assert result["oc"]["files"]["dataProvider"]["hashKey"] == hash_string(bundled)

    def test_data_provider_runs_without_files(self, hello_component):
        ComponentPackager().package(hello_component)
        bundled = (hello_component / "_package" / "server.py").read_text()
        (hello_component / "config.json").unlink()
        namespace = {"require": failing_require}
        exec(bundled, namespace)
        assert namespace["data"]({}) == {"name": "World"}

    def test_static_minified(self, hello_component):
        ComponentPackager().package(hello_component)
        source = (hello_component / "css" / "site.css").read_text()
        assert (hello_component / "_package" / "css" / "site.css").read_text() == rcssmin.cssmin(source)

    def test_without_data_or_static(self, make_component):
        component = make_component()
        files = ComponentPackager().package(component)["oc"]["files"]
        assert "dataProvider" not in files
        assert files["static"] == []
        assert not (component / "_package" / "server.py").exists()

    def test_jade_component(self, make_component):
        component = make_component(template="p Hello #{name}\n", template_type="jade", template_src="view.jade")
        result = ComponentPackager().package(component)
        assert result["oc"]["files"]["template"]["type"] == "jade"

    def test_stale_output_removed(self, hello_component):
        out = hello_component / "_package"
        out.mkdir()
        (out / "stale.txt").write_text("old")
        ComponentPackager().package(hello_component)
        assert not (out / "stale.txt").exists()

    def test_stage_history(self, hello_component):
        packager = ComponentPackager()
        packager.package(hello_component)
        assert packager.history == [
            PackagingStage.VALIDATING,
            PackagingStage.COMPILING_TEMPLATE,
            PackagingStage.BUNDLING_DATA,
            PackagingStage.WRITING_MANIFEST,
            PackagingStage.COPYING_STATIC,
            PackagingStage.DONE,
        ]
        assert packager.stage is PackagingStage.DONE

    def test_bundling_skipped_without_data(self, make_component):
        packager = ComponentPackager()
        packager.package(make_component())
        assert PackagingStage.BUNDLING_DATA not in packager.history


# ============================================================================
# Determinism
# ============================================================================

class TestDeterminism:

    def test_repeat_runs_identical(self, hello_component):
        out = hello_component / "_package"
        first = ComponentPackager().package(hello_component)
        snapshot = {p.relative_to(out): p.read_bytes() for p in out.rglob("*") if p.is_file()}

        second = ComponentPackager().package(hello_component)
        again = {p.relative_to(out): p.read_bytes() for p in out.rglob("*") if p.is_file()}

        assert first == second
        assert snapshot == again

    def test_same_template_same_hash_across_components(self, make_component):
        a = make_component("a")
        b = make_component("b")
        hash_a = ComponentPackager().package(a)["oc"]["files"]["template"]["hashKey"]
        hash_b = ComponentPackager().package(b)["oc"]["files"]["template"]["hashKey"]
        assert hash_a == hash_b


# ============================================================================
# Minification opt-out
# ============================================================================

class TestMinifyOptOut:

    def test_manifest_flag(self, make_component):
        css = "body {\n    color : red ;\n}\n"
        component = make_component(static="css", files={"css/site.css": css}, oc={"minify": False})
        ComponentPackager().package(component)
        assert (component / "_package" / "css" / "site.css").read_text() == css

    def test_caller_flag(self, make_component):
        css = "body {\n    color : red ;\n}\n"
        component = make_component(static="css", files={"css/site.css": css})
        ComponentPackager().package(component, minify=False)
        assert (component / "_package" / "css" / "site.css").read_text() == css


# ============================================================================
# Failures
# ============================================================================

class TestFailures:

    def test_missing_component_dir(self, tmp_path):
        with pytest.raises(MissingFileFault):
            ComponentPackager().package(tmp_path / "nope")
        assert not (tmp_path / "nope").exists()

    def test_missing_package_json(self, tmp_path):
        (tmp_path / "empty").mkdir()
        with pytest.raises(MissingFileFault) as exc_info:
            ComponentPackager().package(tmp_path / "empty")
        assert exc_info.value.message == "component does not contain package.json"
        assert exc_info.value.metadata["stage"] == "validating"

    def test_missing_template(self, make_component):
        component = make_component()
        (component / "template.html").unlink()
        with pytest.raises(MissingFileFault) as exc_info:
            ComponentPackager().package(component)
        assert exc_info.value.message == "file template.html not found"

    def test_missing_manifest_field(self, make_component):
        component = make_component()
        (component / "package.json").write_text(json.dumps({"name": "hello-world"}))
        with pytest.raises(ManifestFieldMissingFault):
            ComponentPackager().package(component)

    @pytest.mark.parametrize("name", ["hello world", "_package"])
    def test_invalid_name(self, make_component, name):
        component = make_component(name, dirname="component")
        with pytest.raises(ComponentNameInvalidFault) as exc_info:
            ComponentPackager().package(component)
        assert exc_info.value.message == "name not valid"

    def test_unsupported_type(self, make_component):
        component = make_component(template_type="handlebars")
        packager = ComponentPackager()
        with pytest.raises(UnsupportedTemplateTypeFault) as exc_info:
            packager.package(component)
        assert exc_info.value.metadata["stage"] == "compiling_template"
        assert packager.stage is PackagingStage.FAILED

    def test_missing_data_file(self, make_component):
        component = make_component()
        manifest = json.loads((component / "package.json").read_text())
        manifest["oc"]["files"]["data"] = "server.py"
        (component / "package.json").write_text(json.dumps(manifest))
        with pytest.raises(MissingFileFault) as exc_info:
            ComponentPackager().package(component)
        assert exc_info.value.metadata["stage"] == "bundling_data"

    def test_missing_require_fails_closed(self, make_component):
        component = make_component(data=DATA_PROVIDER)
        packager = ComponentPackager()
        with pytest.raises(RequireNotFoundFault) as exc_info:
            packager.package(component)

        assert exc_info.value.metadata["stage"] == "bundling_data"
        assert packager.history[-2:] == [PackagingStage.BUNDLING_DATA, PackagingStage.FAILED]
        out = component / "_package"
        assert (out / "template.py").exists()
        assert not (out / "server.py").exists()
        assert not (out / "package.json").exists()

    def test_fault_logged_at_its_severity(self, make_component, caplog):
        component = make_component(data=DATA_PROVIDER)
        with caplog.at_level(logging.DEBUG, logger="ocpack.packager"):
            with pytest.raises(RequireNotFoundFault):
                ComponentPackager().package(component)

        records = [r for r in caplog.records if r.name == "ocpack.packager" and "failed during" in r.getMessage()]
        assert len(records) == 1
        assert records[0].levelno == logging.ERROR
        assert "bundling_data" in records[0].getMessage()

    def test_local_script_require_fails_closed(self, make_component):
        component = make_component(
            data='helper = require("./helper.py")\n',
            files={"helper.py": "x = 1\n"},
        )
        with pytest.raises(LocalScriptNotAllowedFault):
            ComponentPackager().package(component)
        assert not (component / "_package" / "server.py").exists()

    def test_missing_static_dir_keeps_earlier(self, make_component):
        component = make_component(
            static=["a", "missing", "b"],
            files={"a/one.txt": "1", "b/two.txt": "2"},
        )
        with pytest.raises(MissingFileFault) as exc_info:
            ComponentPackager().package(component)

        assert exc_info.value.metadata["stage"] == "copying_static"
        out = component / "_package"
        assert (out / "a" / "one.txt").exists()
        assert not (out / "b").exists()
        assert output_manifest(component)["oc"]["files"]["static"] == ["a", "missing", "b"]

    def test_faults_are_faults(self, tmp_path):
        with pytest.raises(Fault):
            ComponentPackager().package(tmp_path / "nope")


# ============================================================================
# Configuration
# ============================================================================

class TestConfigured:

    def test_toolchain_manifest_version(self, tmp_path, make_component):
        toolchain = tmp_path / "toolchain.json"
        toolchain.write_text(json.dumps({"name": "oc", "version": "9.9.9"}))
        packager = ComponentPackager(PackagerConfig(toolchain_manifest=toolchain))
        assert packager.package(make_component())["oc"]["version"] == "9.9.9"

    def test_missing_toolchain_manifest(self, tmp_path, make_component):
        packager = ComponentPackager(PackagerConfig(toolchain_manifest=tmp_path / "missing.json"))
        with pytest.raises(MissingFileFault) as exc_info:
            packager.package(make_component())
        assert exc_info.value.message == "error resolving toolchain manifest"

    def test_output_dirname(self, make_component):
        component = make_component()
        ComponentPackager(PackagerConfig(output_dirname="dist")).package(component)
        assert (component / "dist" / "template.py").exists()

    def test_evaluate_strategy(self, hello_component):
        config = PackagerConfig(discovery_strategy="evaluate", discovery_timeout=10)
        result = ComponentPackager(config).package(hello_component)
        assert "dataProvider" in result["oc"]["files"]

    def test_custom_registry(self, make_component):
        config = PackagerConfig(registry_namespace="registry", registry_bucket="views")
        component = make_component()
        result = ComponentPackager(config).package(component)
        hash_key = result["oc"]["files"]["template"]["hashKey"]
        html = render(
            (component / "_package" / "template.py").read_text(), hash_key, {"name": "x"},
            namespace="registry", bucket="views",
        )
        assert html == "<p>Hello x</p>"


# ============================================================================
# check / discovery helpers
# ============================================================================

class TestCheck:

    def test_valid(self, hello_component):
        manifest = ComponentPackager().check(hello_component)
        assert manifest.name == "hello-world"
        assert not (hello_component / "_package").exists()

    def test_unsupported_type(self, make_component):
        with pytest.raises(UnsupportedTemplateTypeFault):
            ComponentPackager().check(make_component(template_type="handlebars"))


class TestDiscovery:

    def test_find_components(self, tmp_path, make_component):
        make_component("b")
        make_component("a")
        (tmp_path / "not-a-component").mkdir()
        (tmp_path / "loose.txt").write_text("x")
        assert [p.name for p in find_components(tmp_path)] == ["a", "b"]

    def test_find_components_missing_dir(self, tmp_path):
        with pytest.raises(MissingFileFault):
            find_components(tmp_path / "nope")

    def test_package_component(self, make_component):
        result = package_component(make_component(), minify=False)
        assert result["oc"]["files"]["template"]["src"] == "template.py"

    def test_package_many(self, tmp_path, make_component):
        make_component("a")
        make_component("b")
        results = package_many(tmp_path)
        assert sorted(results) == ["a", "b"]
        assert (tmp_path / "a" / "_package" / "template.py").exists()
