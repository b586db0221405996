# tests/test_extractor.py
"""Tests for extracting the free variables of a template into a scaffold."""

from runtpl.core.engine import extract_variables, parse_template


def _scaffold(source):
    return extract_variables(parse_template(source))


def test_no_variables():
    assert _scaffold("plain text") == {}


def test_simple_and_dotted_variables_merge():
    scaffold = _scaffold("{{name}} {{project.title}} {{project.description}}")
    assert scaffold == {"name": "", "project": {"title": "", "description": ""}}


def test_loop_items_are_not_free_variables():
    source = "{{a.b}}{{foreach item in list}}{{item.x}}{{endfor}}"
    scaffold = _scaffold(source)
    assert set(scaffold) == {"a", "list"}
    assert scaffold["a"] == {"b": ""}
    assert "item" not in scaffold
    assert "x" not in scaffold


def test_loop_over_simple_items_gives_empty_list():
    assert _scaffold("{{foreach f in fruits}}{{f}}{{endfor}}") == {"fruits": []}


def test_loop_over_objects_gives_example_element():
    source = "{{foreach item in list}}{{item.x}} {{item.y.z}}{{endfor}}"
    assert _scaffold(source) == {"list": [{"x": "", "y": {"z": ""}}]}


def test_nested_loops_describe_outer_items():
    source = (
        "{{foreach team in teams}}{{team.name}}"
        "{{foreach member in team.members}}{{member.email}}{{endfor}}"
        "{{endfor}}"
    )
    assert _scaffold(source) == {"teams": [{"name": "", "members": [{"email": ""}]}]}


def test_free_variables_inside_loops_are_surfaced():
    source = "{{foreach x in xs}}{{prefix}}{{x}}{{endfor}}"
    assert _scaffold(source) == {"xs": [], "prefix": ""}


def test_shadowed_name_stays_bound_inside_loop():
    source = "{{foreach name in names}}{{name.first}}{{endfor}}"
    scaffold = _scaffold(source)
    assert scaffold == {"names": [{"first": ""}]}
    assert "name" not in scaffold


def test_builtin_call_arguments():
    source = '{{foreach f in files(source: src_dirs, exclude_names: ["x"], recursive: deep.flag)}}{{f.path}}{{endfor}}'
    scaffold = _scaffold(source)
    assert scaffold == {"src_dirs": "", "deep": {"flag": ""}}
    assert "f" not in scaffold


def test_extraction_needs_no_data():
    # unknown functions and missing data are irrelevant to extraction.
    source = "{{foreach x in nope(a: b)}}{{x.y}}{{endfor}}{{c}}"
    assert _scaffold(source) == {"b": "", "c": ""}
