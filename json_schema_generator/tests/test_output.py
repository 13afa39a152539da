import pytest

from json_schema_generator.output import (
    AtomicWriter,
    OutputConfig,
    OutputMode,
    SchemaWriteError,
    validate_json,
    write_schema,
)


class TestAtomicWriter:
    def test_write_creates_directories(self, tmp_path):
        target = tmp_path / "nested" / "Person.schema.json"
        AtomicWriter().write(target, '{"type": "object"}')
        assert target.read_text() == '{"type": "object"}'

    def test_no_temporary_files_left(self, tmp_path):
        target = tmp_path / "Person.schema.json"
        AtomicWriter().write(target, "{}")
        assert [path.name for path in tmp_path.iterdir()] == ["Person.schema.json"]

    def test_invalid_content_not_written(self, tmp_path):
        target = tmp_path / "Person.schema.json"
        target.write_text("{}")
        with pytest.raises(SchemaWriteError, match="not valid JSON"):
            AtomicWriter().write(target, '{"type": ')
        assert target.read_text() == "{}"
        assert [path.name for path in tmp_path.iterdir()] == ["Person.schema.json"]

    def test_validation_can_be_skipped(self, tmp_path):
        target = tmp_path / "notes.txt"
        AtomicWriter().write(target, "not json", validate=False)
        assert target.read_text() == "not json"

    def test_custom_validation(self, tmp_path):
        def reject_everything(content):
            raise SchemaWriteError("rejected")

        with pytest.raises(SchemaWriteError, match="rejected"):
            AtomicWriter(reject_everything).write(tmp_path / "a.json", "{}")
        assert not (tmp_path / "a.json").exists()

    def test_write_if_not_exists(self, tmp_path):
        target = tmp_path / "a.json"
        writer = AtomicWriter()
        writer.write_if_not_exists(target, "{}")
        with pytest.raises(SchemaWriteError, match="already exists"):
            writer.write_if_not_exists(target, "[]")
        assert target.read_text() == "{}"


class TestWriteSchema:
    @pytest.mark.parametrize("atomic_write", [True, False])
    def test_existing_file(self, tmp_path, atomic_write):
        target = tmp_path / "a.json"
        target.write_text("{}")
        with pytest.raises(SchemaWriteError):
            write_schema(target, "[]", OutputConfig(atomic_write=atomic_write))
        write_schema(target, "[]", OutputConfig(mode=OutputMode.FORCE, atomic_write=atomic_write))
        assert target.read_text() == "[]"

    @pytest.mark.parametrize("atomic_write", [True, False])
    def test_invalid_json(self, tmp_path, atomic_write):
        with pytest.raises(SchemaWriteError):
            write_schema(tmp_path / "a.json", "{", OutputConfig(atomic_write=atomic_write))
        assert not (tmp_path / "a.json").exists()

    def test_without_validation(self, tmp_path):
        write_schema(tmp_path / "a.json", "{", OutputConfig(validate_before_write=False, atomic_write=False))
        assert (tmp_path / "a.json").read_text() == "{"


def test_validate_json():
    validate_json('{"$ref": "#"}')
    with pytest.raises(SchemaWriteError):
        validate_json("")


if __name__ == "__main__":
    pytest.main([__file__])
