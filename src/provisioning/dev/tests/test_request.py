"""Tests for request descriptors and option handling."""

from __future__ import annotations

from pydantic import SecretStr

from provisioning import RequestOptions, RequestSpec, pick_only_existing_values


# ═════════════════════════════════════════════════════════════════════════════
# pick_only_existing_values
# ═════════════════════════════════════════════════════════════════════════════


def test_pick_drops_none_keeps_falsy() -> None:
    source = {"a": 1, "b": None, "c": False, "d": 0, "e": "", "f": []}
    assert pick_only_existing_values(source) == {"a": 1, "c": False, "d": 0, "e": "", "f": []}


def test_pick_restricts_to_keys() -> None:
    source = {"a": 1, "b": 2, "c": None}
    assert pick_only_existing_values(source, "b", "c") == {"b": 2}


def test_pick_preserves_insertion_order() -> None:
    source = {"z": 1, "a": None, "m": 2, "b": 3}
    assert list(pick_only_existing_values(source)) == ["z", "m", "b"]


def test_pick_is_idempotent() -> None:
    source = {"page_size": 10, "page": None, "sort_by": None, "sort_order": "asc"}
    once = pick_only_existing_values(source)
    assert pick_only_existing_values(once) == once


def test_pick_returns_new_mapping() -> None:
    source = {"a": 1}
    picked = pick_only_existing_values(source)
    picked["b"] = 2
    assert source == {"a": 1}


# ═════════════════════════════════════════════════════════════════════════════
# RequestOptions
# ═════════════════════════════════════════════════════════════════════════════


def test_coerce_none_gives_empty_options() -> None:
    assert RequestOptions.coerce(None).to_dict() == {}


def test_coerce_does_not_mutate_caller_mapping() -> None:
    caller = {"page_size": 5, "custom": "x"}
    opts = RequestOptions.coerce(caller).with_json()
    assert caller == {"page_size": 5, "custom": "x"}
    assert opts.content_type == "json"


def test_extras_survive() -> None:
    opts = RequestOptions.coerce({"resource_type": "image", "name": "key1"})
    assert opts.to_dict() == {"resource_type": "image", "name": "key1"}
    assert opts.with_json().to_dict() == {"resource_type": "image", "name": "key1", "content_type": "json"}


def test_with_json_overrides_content_type() -> None:
    opts = RequestOptions(content_type="form", page=2)
    annotated = opts.with_json()
    assert annotated.is_json
    assert annotated.page == 2
    assert opts.content_type == "form"


def test_secret_option_is_masked() -> None:
    opts = RequestOptions.coerce({"provisioning_api_secret": "hunter2"})
    assert opts.provisioning_api_secret == "hunter2"
    assert "hunter2" not in repr(opts)

    wrapped = RequestOptions.coerce({"provisioning_api_secret": SecretStr("hunter2")})
    assert isinstance(wrapped.provisioning_api_secret, SecretStr)


def test_coerce_keeps_values_unconverted() -> None:
    opts = RequestOptions.coerce({"page_size": "10", "name": 1234, "timeout": 0, "extra_flag": 2.5})
    assert opts.page_size == "10"
    assert opts.name == 1234
    assert opts.timeout == 0
    assert opts.to_dict() == {"page_size": "10", "name": 1234, "timeout": 0, "extra_flag": 2.5}


# ═════════════════════════════════════════════════════════════════════════════
# RequestSpec
# ═════════════════════════════════════════════════════════════════════════════


def test_create_filters_params() -> None:
    spec = RequestSpec.create("GET", ["users"], {"prefix": "jo", "pending": None})
    assert spec.params == {"prefix": "jo"}
    assert spec.uri == ("users",)


def test_create_json_flag() -> None:
    spec = RequestSpec.create("POST", ["user_groups"], {"name": "ops"}, {"page": 1}, json=True)
    assert spec.options.content_type == "json"
    assert spec.options.page == 1


def test_identical_arguments_build_equal_specs() -> None:
    args = ("PUT", ["sub_accounts", "abc"], {"name": "x", "enabled": False}, {"timeout": 5})
    assert RequestSpec.create(*args, json=True) == RequestSpec.create(*args, json=True)


def test_path_joins_segments() -> None:
    spec = RequestSpec.create("DELETE", ["sub_accounts", "abc", "access_keys", 1234])
    assert spec.path == "sub_accounts/abc/access_keys/1234"


def test_send_returns_transport_result() -> None:
    calls = []

    def transport(method, uri, params, callback, options):
        calls.append((method, uri, params, callback, options))
        return "sentinel"

    spec = RequestSpec.create("GET", ["user_groups"])
    assert spec.send(transport) == "sentinel"
    assert calls == [("GET", ("user_groups",), {}, None, spec.options)]
