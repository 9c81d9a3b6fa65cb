import os
import stat

import pytest

from butler.core.models import MaterializationJob
from butler.materialize import files as files_module
from butler.materialize.exclusion import ExclusionFilter
from butler.materialize.files import FileMaterializer


@pytest.fixture
def materializer_for(make_evaluator):
    def factory(**answers):
        return FileMaterializer(make_evaluator(answers=answers), ExclusionFilter())

    return factory


def _job(path):
    return MaterializationJob(source=path, base_name=path.name)


class TestMaterialize:
    def test_renders_content_in_place(self, materializer_for, tmp_path):
        source = tmp_path / "README.md"
        source.write_text("Hello butler{ project.name }\n")

        assert materializer_for().materialize(_job(source)) is None
        assert source.read_text() == "Hello demo\n"

    def test_renamed_file_replaces_source(self, materializer_for, tmp_path):
        source = tmp_path / "{ Name }.py"
        source.write_text("NAME = 'butler{ Name }'\n")

        assert materializer_for(Name="app").materialize(_job(source)) is None
        assert not source.exists()
        assert (tmp_path / "app.py").read_text() == "NAME = 'app'\n"

    def test_blank_name_deletes_file(self, materializer_for, tmp_path):
        source = tmp_path / "{% if false %}gone.txt{% endif %}"
        source.write_text("gone")

        assert materializer_for().materialize(_job(source)) is None
        assert list(tmp_path.iterdir()) == []

    def test_blank_content_deletes_file(self, materializer_for, tmp_path):
        source = tmp_path / "Dockerfile"
        source.write_text("butler{% if docker %}FROM python:3.12\nbutler{% endif %}")

        assert materializer_for(docker=False).materialize(_job(source)) is None
        assert not source.exists()

    def test_empty_file_is_kept(self, materializer_for, tmp_path):
        source = tmp_path / "__init__.py"
        source.write_text("")

        assert materializer_for().materialize(_job(source)) is None
        assert source.read_text() == ""

    def test_preserves_file_mode(self, materializer_for, tmp_path):
        source = tmp_path / "run.sh"
        source.write_text("#!/bin/sh\necho butler{ project.name }\n")
        source.chmod(0o755)

        materializer_for().materialize(_job(source))

        assert stat.S_IMODE(os.stat(source).st_mode) == 0o755

    def test_render_error_keeps_source(self, materializer_for, tmp_path):
        source = tmp_path / "broken.txt"
        source.write_text("butler{ undefined_value }")

        record = materializer_for().materialize(_job(source))

        assert record is not None
        assert record.phase == "render"
        assert record.path == source
        assert source.read_text() == "butler{ undefined_value }"

    def test_name_error_is_recorded(self, materializer_for, tmp_path):
        source = tmp_path / "{ nope }.txt"
        source.write_text("x")

        record = materializer_for().materialize(_job(source))

        assert record is not None and record.phase == "render"
        assert source.exists()

    def test_undecodable_file_is_recorded(self, materializer_for, tmp_path):
        source = tmp_path / "data.txt"
        source.write_bytes(b"\xff\xfe\x00bad")

        record = materializer_for().materialize(_job(source))

        assert record is not None and record.phase == "read"

    def test_absolute_name_is_not_written_outside(self, materializer_for, tmp_path, monkeypatch):
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()
        monkeypatch.chdir(elsewhere)
        staging = tmp_path / "staging"
        staging.mkdir()
        source = staging / "{ path_abs('leak.txt') }"
        source.write_text("leaked butler{ project.name }")

        record = materializer_for().materialize(_job(source))

        assert record is not None and record.phase == "render"
        assert not (elsewhere / "leak.txt").exists()
        assert source.exists()

    def test_parent_reference_is_recorded(self, materializer_for, tmp_path):
        (tmp_path / "inner").mkdir()
        source = tmp_path / "inner" / "{ n }"
        source.write_text("x")

        record = materializer_for(n="../up.txt").materialize(_job(source))

        assert record is not None and record.phase == "render"
        assert not (tmp_path / "up.txt").exists()

    def test_write_value_error_is_recorded(self, materializer_for, tmp_path, monkeypatch):
        def invalid(path, text, mode):
            raise ValueError("embedded null byte")

        monkeypatch.setattr(files_module, "replace_text", invalid)
        source = tmp_path / "a.txt"
        source.write_text("butler{ project.name }")

        record = materializer_for().materialize(_job(source))

        assert record is not None and record.phase == "write"
        assert source.read_text() == "butler{ project.name }"


class TestRun:
    def test_excluded_files_get_no_job(self, materializer_for, tmp_path, write_tree):
        write_tree(
            tmp_path,
            {
                "a.txt": "butler{ project.name }",
                "node_modules/b.js": "butler{ broken",
                ".hidden": "butler{ broken",
                "img.png": b"butler{ broken",
            },
        )
        materializer = materializer_for()

        jobs = list(materializer.iter_jobs(tmp_path))
        count, errors = materializer.run(tmp_path, workers=3)

        assert [job.base_name for job in jobs] == ["a.txt"]
        assert count == 1
        assert errors == []
        assert (tmp_path / "node_modules" / "b.js").read_text() == "butler{ broken"
        assert (tmp_path / ".hidden").read_text() == "butler{ broken"
        assert (tmp_path / "img.png").read_bytes() == b"butler{ broken"

    @pytest.mark.parametrize("workers", [1, 4])
    def test_error_count_independent_of_workers(
        self, materializer_for, tmp_path, write_tree, workers
    ):
        files = {f"ok{i}.txt": "butler{ project.name }" for i in range(10)}
        files.update({f"bad{i}.txt": "butler{ missing }" for i in range(7)})
        write_tree(tmp_path, files)

        count, errors = materializer_for().run(tmp_path, workers=workers)

        assert count == 17
        assert len(errors) == 7
        assert all(e.phase == "render" for e in errors)
        assert (tmp_path / "ok3.txt").read_text() == "demo"

    def test_bad_name_does_not_stall_the_pass(self, materializer_for, tmp_path, write_tree):
        files = {f"ok{i}.txt": "butler{ project.name }" for i in range(5)}
        files["a{ n }"] = "x"
        write_tree(tmp_path, files)

        count, errors = materializer_for(n="a\x00b").run(tmp_path, workers=1)

        assert count == 6
        assert [(e.path.name, e.phase) for e in errors] == [("a{ n }", "render")]
        assert all((tmp_path / f"ok{i}.txt").read_text() == "demo" for i in range(5))
