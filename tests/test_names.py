"""Tests for perch.routing.names — method name to route compilation."""

import pytest

from perch.routing.names import (
    ANY_METHOD,
    VERBS,
    CompiledHandler,
    compile_handler_name,
    compile_mount_name,
    segment_identifier,
)


class TestSegmentIdentifier:
    def test_single_word(self) -> None:
        assert segment_identifier("Other") == ["other"]

    def test_camel_case_words(self) -> None:
        assert segment_identifier("MultiPartRoute") == ["multi", "part", "route"]

    def test_acronym_then_word(self) -> None:
        assert segment_identifier("ABBRIncluded") == ["abbr", "included"]

    def test_trailing_acronym_stays_whole(self) -> None:
        assert segment_identifier("OtherJSON") == ["other", "json"]

    def test_root_alone_is_empty(self) -> None:
        assert segment_identifier("Root") == []

    def test_root_prefix_dropped(self) -> None:
        assert segment_identifier("RootJSON") == ["json"]
        assert segment_identifier("RootUsers") == ["users"]

    def test_root_only_dropped_as_whole_token(self) -> None:
        assert segment_identifier("Rooted") == ["rooted"]
        assert segment_identifier("Rootkit") == ["rootkit"]

    def test_root_later_in_name_kept(self) -> None:
        assert segment_identifier("OtherRoot") == ["other", "root"]

    def test_empty(self) -> None:
        assert segment_identifier("") == []

    def test_digits_stay_with_word(self) -> None:
        assert segment_identifier("V2Users") == ["v2", "users"]

    def test_lowercase_start(self) -> None:
        assert segment_identifier("usersList") == ["users", "list"]


class TestCompileHandlerName:
    @pytest.mark.parametrize("verb", VERBS)
    def test_every_verb_on_root(self, verb: str) -> None:
        compiled = compile_handler_name(f"{verb}Root")
        assert compiled == CompiledHandler(verb=verb.upper(), pattern="/")

    def test_handle_means_any_method(self) -> None:
        compiled = compile_handler_name("HandleRoot")
        assert compiled is not None
        assert compiled.verb == ANY_METHOD
        assert compiled.any_method is True

    def test_specific_verb_is_not_any(self) -> None:
        compiled = compile_handler_name("GetRoot")
        assert compiled is not None
        assert compiled.any_method is False

    def test_root_with_param(self) -> None:
        compiled = compile_handler_name("GetRootByID")
        assert compiled is not None
        assert compiled.pattern == "/{id}"
        assert compiled.param == "id"

    def test_single_segment(self) -> None:
        compiled = compile_handler_name("GetOther")
        assert compiled == CompiledHandler(verb="GET", pattern="/other")

    def test_trailing_acronym(self) -> None:
        compiled = compile_handler_name("GetOtherJSON")
        assert compiled is not None
        assert compiled.pattern == "/other/json"

    def test_leading_acronym(self) -> None:
        compiled = compile_handler_name("GetABBRIncluded")
        assert compiled is not None
        assert compiled.pattern == "/abbr/included"

    def test_param_lowercased(self) -> None:
        compiled = compile_handler_name("GetOtherByName")
        assert compiled is not None
        assert compiled.pattern == "/other/{name}"

    def test_multi_segment(self) -> None:
        compiled = compile_handler_name("GetMultiPartRoute")
        assert compiled is not None
        assert compiled.pattern == "/multi/part/route"

    def test_multi_word_param_is_not_segmented(self) -> None:
        compiled = compile_handler_name("GetMultiPartRouteByOnlyOneParamPart")
        assert compiled is not None
        assert compiled.pattern == "/multi/part/route/{onlyoneparampart}"
        assert compiled.param == "onlyoneparampart"

    def test_post_verb(self) -> None:
        compiled = compile_handler_name("PostUserByID")
        assert compiled == CompiledHandler(verb="POST", pattern="/user/{id}", param="id")

    def test_first_by_splits_the_name(self) -> None:
        compiled = compile_handler_name("GetUserByNameByID")
        assert compiled is not None
        assert compiled.pattern == "/user/{namebyid}"

    @pytest.mark.parametrize(
        "name",
        [
            "BadMethodName",
            "Get",
            "GetRoot_",
            "getRoot",
            "Fetch",
            "MountWeb",
            "UseOther",
            "Get1Thing",
            "",
        ],
    )
    def test_rejected(self, name: str) -> None:
        assert compile_handler_name(name) is None

    def test_idempotent(self) -> None:
        first = compile_handler_name("GetMultiPartRouteByOnlyOneParamPart")
        second = compile_handler_name("GetMultiPartRouteByOnlyOneParamPart")
        assert first == second


class TestCompileMountName:
    def test_root(self) -> None:
        assert compile_mount_name("MountRoot") == "/"

    def test_single_segment(self) -> None:
        assert compile_mount_name("MountOther") == "/other"

    def test_multi_segment(self) -> None:
        assert compile_mount_name("MountMultiPartRoute") == "/multi/part/route"

    def test_by_is_just_a_word(self) -> None:
        assert compile_mount_name("MountWebByParam") == "/web/by/param"

    @pytest.mark.parametrize("name", ["BadPrefix", "GetRoot", "Mount", "mountWeb", "Mount_Web"])
    def test_rejected(self, name: str) -> None:
        assert compile_mount_name(name) is None

    def test_idempotent(self) -> None:
        assert compile_mount_name("MountWeb") == compile_mount_name("MountWeb")


class TestGrammarsDisjoint:
    @pytest.mark.parametrize(
        "name",
        ["GetRoot", "HandleRoot", "MountRoot", "MountWebByParam", "GetOtherByName", "UseOther"],
    )
    def test_no_name_compiles_both_ways(self, name: str) -> None:
        handler = compile_handler_name(name)
        mount = compile_mount_name(name)
        assert handler is None or mount is None
