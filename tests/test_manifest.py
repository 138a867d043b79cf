"""
Component Manifest (manifest.py, validator.py)
"""

import json

import pytest

from ocpack.faults import ManifestFieldMissingFault, MissingFileFault, ValidationFault
from ocpack.manifest import ComponentManifest, normalize_static
from ocpack.validator import is_valid_component_name, is_valid_template_type


def manifest(**oc_files):
    return ComponentManifest.from_dict({
        "name": "hello-world",
        "version": "1.0.0",
        "description": "kept as-is",
        "oc": {"files": {"template": {"src": "view.jade", "type": "jade"}, **oc_files}},
    })


# ============================================================================
# Static normalization
# ============================================================================

class TestNormalizeStatic:

    def test_missing(self):
        assert normalize_static(None) == []

    def test_empty(self):
        assert normalize_static("") == []
        assert normalize_static([]) == []

    def test_single_name(self):
        assert normalize_static("img") == ["img"]

    def test_list_order_kept(self):
        assert normalize_static(["js", "css", "img"]) == ["js", "css", "img"]

    @pytest.mark.parametrize("value", [5, {"dir": "img"}, ["img", 3], ["img", ""]])
    def test_invalid(self, value):
        with pytest.raises(ValidationFault) as exc_info:
            normalize_static(value)
        assert exc_info.value.code == "STATIC_DECLARATION_INVALID"


# ============================================================================
# Loading & validation
# ============================================================================

class TestLoad:

    def test_load(self, tmp_path):
        path = tmp_path / "package.json"
        path.write_text(json.dumps({"name": "x", "oc": {}}))
        assert ComponentManifest.load(path).name == "x"

    def test_missing(self, tmp_path):
        with pytest.raises(MissingFileFault) as exc_info:
            ComponentManifest.load(tmp_path / "package.json")
        assert exc_info.value.message == "component does not contain package.json"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "package.json"
        path.write_text("{nope")
        with pytest.raises(ValidationFault) as exc_info:
            ComponentManifest.load(path)
        assert exc_info.value.code == "MANIFEST_INVALID"

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "package.json"
        path.write_text("[]")
        with pytest.raises(ValidationFault):
            ComponentManifest.load(path)

    def test_from_dict_copies(self):
        raw = {"oc": {"files": {"template": {"src": "a", "type": "jade"}}}}
        m = ComponentManifest.from_dict(raw)
        m.set_template("abc")
        assert raw["oc"]["files"]["template"] == {"src": "a", "type": "jade"}


class TestValidate:

    def test_valid(self):
        manifest().validate()

    @pytest.mark.parametrize("data, field", [
        ({"name": "x"}, "oc"),
        ({"oc": {"files": {}}}, "oc.files.template"),
        ({"oc": {"files": {"template": {"type": "jade"}}}}, "oc.files.template.src"),
        ({"oc": {"files": {"template": {"src": "a.jade"}}}}, "oc.files.template.type"),
    ])
    def test_missing_fields(self, data, field):
        with pytest.raises(ManifestFieldMissingFault) as exc_info:
            ComponentManifest.from_dict(data).validate()
        assert exc_info.value.metadata["field"] == field
        assert isinstance(exc_info.value, ValidationFault)


# ============================================================================
# Accessors & rewrites
# ============================================================================

class TestAccessors:

    def test_fields(self):
        m = manifest(data="server.py", static="img")
        assert m.template_src == "view.jade"
        assert m.template_type == "jade"
        assert m.data_src == "server.py"
        assert m.static_dirs == ("img",)

    def test_no_data(self):
        assert manifest().data_src is None

    @pytest.mark.parametrize("value, expected", [
        (None, True), (True, True), (False, False), (0, True),
    ])
    def test_minify_only_explicit_false_disables(self, value, expected):
        m = manifest()
        if value is not None:
            m.data["oc"]["minify"] = value
        assert m.minify is expected


class TestRewrites:

    def test_set_template(self):
        m = manifest(client="client.js")
        m.set_template("h1")
        files = m.to_dict()["oc"]["files"]
        assert files["template"] == {"type": "jade", "hashKey": "h1", "src": "template.py"}
        assert "client" not in files

    def test_set_data_provider(self):
        m = manifest(data="server.py")
        m.set_data_provider("h2")
        files = m.to_dict()["oc"]["files"]
        assert files["dataProvider"] == {"type": "python", "hashKey": "h2", "src": "server.py"}
        assert "data" not in files

    def test_toolchain_version(self):
        m = manifest()
        m.set_toolchain_version("9.9.9")
        assert m.to_dict()["oc"]["version"] == "9.9.9"

    def test_normalize_static(self):
        m = manifest(static="img")
        m.normalize_static()
        assert m.to_dict()["oc"]["files"]["static"] == ["img"]

    def test_other_keys_untouched(self):
        m = manifest()
        m.set_template("h1")
        assert m.to_dict()["description"] == "kept as-is"

    def test_write(self, tmp_path):
        m = manifest()
        m.write(tmp_path / "package.json")
        assert json.loads((tmp_path / "package.json").read_text()) == m.to_dict()


# ============================================================================
# Validator
# ============================================================================

class TestValidator:

    @pytest.mark.parametrize("name", ["hello", "hello-world", "hello_world", "Widget2"])
    def test_valid_names(self, name):
        assert is_valid_component_name(name)

    @pytest.mark.parametrize("name", ["", "hello world", "a/b", "_package", "héllo", None, 3])
    def test_invalid_names(self, name):
        assert not is_valid_component_name(name)

    def test_template_types(self):
        assert is_valid_template_type("jade")
        assert is_valid_template_type("jinja2")
        assert not is_valid_template_type("handlebars")
        assert not is_valid_template_type(None)
