"""Unit tests for configuration loading and the entry point."""

import json

import pytest

from coursebook.config import DEFAULT_CONFIG, load_config
from coursebook.core.exceptions import ConfigurationError
from coursebook.main import CoursebookPlatform, main


def test_defaults():
    assert load_config() == DEFAULT_CONFIG


def test_file_and_overrides(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"rest_port": 9000, "log_level": "debug"}))

    config = load_config(str(path), {"rest_host": "127.0.0.1", "rest_port": None})

    assert config["rest_port"] == 9000
    assert config["rest_host"] == "127.0.0.1"
    assert config["log_level"] == "debug"


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_config(str(tmp_path / "absent.json"))


def test_invalid_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")

    with pytest.raises(ConfigurationError):
        load_config(str(path))


def test_unknown_key(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"database_url": "sqlite://"}))

    with pytest.raises(ConfigurationError) as exc_info:
        load_config(str(path))
    assert exc_info.value.details == {"keys": ["database_url"]}


@pytest.mark.parametrize("overrides", [{"log_level": "LOUD"}, {"rest_port": 70000}])
def test_invalid_values(overrides):
    with pytest.raises(ConfigurationError):
        load_config(overrides=overrides)


def test_platform_sample_data():
    platform = CoursebookPlatform({"sample_data": True})
    registry = platform.registry

    assert [c.code for c in registry.courses] == ["CS101", "MATH201", "HIST110"]
    assert registry.total_enrolled_students == 5
    assert registry.overall_grade(registry.get_student("S001")).value == pytest.approx(90.25)
    assert platform.event_service.get_processing_statistics()["total_events"] > 0


def test_demo_prints_report(capsys):
    main(["--demo", "--log-level", "WARNING"])

    output = capsys.readouterr().out
    assert "HIST110: course_full" in output
    assert "Alice Johnson (S001): 90.25" in output
    assert "Carol Davis (S003): No grades have been assigned to this student" in output


def test_demo_seeds_students_when_only_courses_exist(capsys):
    platform = CoursebookPlatform()
    platform.registry.add_course("CS101", "Custom intro", 1)

    platform.run_demo()

    output = capsys.readouterr().out
    assert "Enroll S003 in HIST110: course_full" in output
    assert platform.registry.find_course("CS101").name == "Custom intro"
