"""
Tests for ConfParser: tree construction, repeated keys, verbatim bodies,
include merging and error reporting.
"""

from __future__ import annotations

import logging

import pytest

from nginx_conf_parser.pipeline import (
    Block,
    Collection,
    ConfParser,
    ConverterConfig,
    MalformedInputError,
    MappingIncludeResolver,
    Scalar,
    StructuralConflictError,
    UnresolvedIncludeError,
    VerbatimLines,
    to_python,
)


def parse(text: str, **kwargs) -> dict:
    return to_python(ConfParser(**kwargs).parse(text))


class TestParseBasics:
    """Tests for directives and blocks."""

    def test_single_directive(self):
        assert parse("listen 80;") == {"listen": "80"}

    def test_empty_input(self):
        assert parse("") == {}
        assert parse("# only a comment\n\n") == {}

    def test_nested_blocks(self):
        text = """
http {
    server {
        listen 80;
        location / {
            root /var/www;
        }
    }
}
"""
        assert parse(text) == {"http": {"server": {"listen": "80", "location /": {"root": "/var/www"}}}}

    def test_directive_without_arguments(self):
        assert parse("upstream u {\n    ip_hash;\n}") == {"upstream u": {"ip_hash": ""}}

    def test_empty_block(self):
        assert parse("events {}") == {"events": {}}

    def test_key_order_is_preserved(self):
        tree = parse("user www;\nworker_processes 4;\nerror_log /x;\npid /y;")
        assert list(tree) == ["user", "worker_processes", "error_log", "pid"]

    def test_block_name_keeps_arguments(self):
        tree = parse("location ~* \\.(jpg|png)$ {\n    expires 30d;\n}")
        assert tree == {"location ~* \\.(jpg|png)$": {"expires": "30d"}}

    def test_quoted_braces_in_arguments(self):
        text = 'location /health {\n    return 200 "{ ok }";\n}'
        assert parse(text) == {"location /health": {"return": '200 "{ ok }"'}}

        text = "log_format json escape=json '{ \"status\": \"$status\" }';"
        assert parse(text) == {"log_format": "json escape=json '{ \"status\": \"$status\" }'"}

    def test_block_name_spacing_is_preserved(self):
        assert parse("location  ~  \\.php$ {\n    fastcgi_pass php;\n}") == {
            "location  ~  \\.php$": {"fastcgi_pass": "php"}
        }

    def test_bytes_input(self):
        assert parse(b"listen 80;") == {"listen": "80"}

    def test_parser_can_be_reused(self):
        parser = ConfParser()
        first = parser.parse("listen 80;")
        second = parser.parse("listen 81;")
        assert first == Block({"listen": Scalar("80")})
        assert second == Block({"listen": Scalar("81")})

    def test_returns_value_tree(self):
        tree = ConfParser().parse("server {\n    listen 80;\n}")
        assert tree == Block({"server": Block({"listen": Scalar("80")})})


class TestRepeatedKeys:
    """Tests for promotion of repeated keys to collections."""

    def test_repeated_directive(self):
        text = "upstream u {\n    server a;\n    server b;\n}"
        assert parse(text) == {"upstream u": {"server": ["a", "b"]}}

    def test_repeated_directive_keeps_each_argument(self):
        text = "add_header X-A 1;\nadd_header X-B 2;\nadd_header X-C 3;"
        assert parse(text) == {"add_header": ["X-A 1", "X-B 2", "X-C 3"]}

    def test_repeated_blocks(self):
        text = """
http {
    server {
        listen 80;
    }
    server {
        listen 443;
        server_name b;
    }
}
"""
        assert parse(text) == {"http": {"server": [{"listen": "80"}, {"listen": "443", "server_name": "b"}]}}

    def test_children_land_in_the_right_element(self):
        text = """
server {
    listen 1;
}
server {
    listen 2;
    location / {
        root /a;
    }
    location / {
        root /b;
    }
}
server {
    listen 3;
}
"""
        assert parse(text) == {
            "server": [
                {"listen": "1"},
                {"listen": "2", "location /": [{"root": "/a"}, {"root": "/b"}]},
                {"listen": "3"},
            ]
        }

    def test_repeated_directive_inside_repeated_block(self):
        text = "server {\n listen 1;\n}\nserver {\n listen 2;\n listen 3;\n}"
        assert parse(text) == {"server": [{"listen": "1"}, {"listen": ["2", "3"]}]}

    def test_interleaved_keys_are_grouped_at_first_position(self):
        tree = parse("a 1;\nb 2;\na 3;")
        assert tree == {"a": ["1", "3"], "b": "2"}
        assert list(tree) == ["a", "b"]

    def test_directive_then_block_conflicts(self):
        with pytest.raises(StructuralConflictError) as exc_info:
            parse("server x;\nserver {\n}")
        assert exc_info.value.line == 2


class TestMultiLineStatements:
    """Tests for statements spanning several lines and lines holding several statements."""

    def test_directive_split_across_lines(self):
        text = "log_format main '$remote_addr'\n                '$status';"
        assert parse(text) == {"log_format": "main '$remote_addr' '$status'"}

    def test_block_opening_on_next_line(self):
        assert parse("server\n{\n    listen 80;\n}") == {"server": {"listen": "80"}}

    def test_several_blocks_on_one_line(self):
        text = "upstream x {server A;} upstream y {server B; server C;}"
        assert parse(text) == {"upstream x": {"server": "A"}, "upstream y": {"server": ["B", "C"]}}

    def test_closing_braces_glued_together(self):
        assert parse("http { server { listen 80;}}") == {"http": {"server": {"listen": "80"}}}


class TestVerbatimBodies:
    """Tests for *_by_lua_block capture."""

    def test_lua_body_is_stored_under_raw(self):
        text = """
location /lua {
    content_by_lua_block {
        local x = {1, 2}
        ngx.say("a; b")
    }
}
"""
        assert parse(text) == {
            "location /lua": {"content_by_lua_block": {"_raw": ["local x = {1, 2}", 'ngx.say("a; b")']}}
        }

    def test_raw_lines_are_verbatim_values(self):
        tree = ConfParser().parse("init_by_lua_block {\n    require 'x'\n}")
        assert tree["init_by_lua_block"]["_raw"] == VerbatimLines(["require 'x'"])

    def test_empty_body(self):
        assert parse("init_by_lua_block {\n}") == {"init_by_lua_block": {"_raw": []}}

    def test_repeated_lua_blocks(self):
        text = "a_by_lua_block {\n x()\n}\na_by_lua_block {\n y()\n}"
        assert parse(text) == {"a_by_lua_block": [{"_raw": ["x()"]}, {"_raw": ["y()"]}]}

    def test_lone_brace_inside_lua_string(self):
        text = 'content_by_lua_block {\n    ngx.say("{")\n}\nlisten 80;'
        assert parse(text) == {"content_by_lua_block": {"_raw": ['ngx.say("{")']}, "listen": "80"}

    def test_custom_verbatim_suffix(self):
        config = ConverterConfig(verbatim_suffix="_by_js")
        text = "body_by_js {\n if (a) { b; }\n}\ncontent_by_lua_block {\n}"
        assert parse(text, config=config) == {"body_by_js": {"_raw": ["if (a) { b; }"]}, "content_by_lua_block": {}}


class TestIncludes:
    """Tests for include merging through an in-memory resolver."""

    def parse_with(self, text: str, files: dict[str, str], **config) -> dict:
        return parse(text, config=ConverterConfig(**config), resolver=MappingIncludeResolver(files))

    def test_include_is_merged_in_place(self):
        files = {"mime.types": "types {\n    text/html html;\n}"}
        tree = self.parse_with("http {\n    include mime.types;\n    sendfile on;\n}", files)
        assert tree == {"http": {"types": {"text/html": "html"}, "sendfile": "on"}}

    def test_include_glob_merges_in_sorted_order(self):
        files = {
            "conf.d/b.conf": "server {\n    listen 2;\n}",
            "conf.d/a.conf": "server {\n    listen 1;\n}",
            "other.conf": "server {\n    listen 9;\n}",
        }
        tree = self.parse_with("http {\n    include conf.d/*.conf;\n}", files)
        assert tree == {"http": {"server": [{"listen": "1"}, {"listen": "2"}]}}

    def test_included_blocks_join_local_blocks(self):
        files = {"extra.conf": "server {\n    listen 2;\n}"}
        text = "server {\n    listen 1;\n}\ninclude extra.conf;\nserver {\n    listen 3;\n    root /x;\n}"
        tree = self.parse_with(text, files)
        assert tree == {"server": [{"listen": "1"}, {"listen": "2"}, {"listen": "3", "root": "/x"}]}

    def test_nested_includes(self):
        files = {"a.conf": "include b.conf;\nworker_processes 2;", "b.conf": "user nobody;"}
        assert self.parse_with("include a.conf;", files) == {"user": "nobody", "worker_processes": "2"}

    def test_quoted_pattern(self):
        files = {"a.conf": "user nobody;"}
        assert self.parse_with('include "a.conf";', files) == {"user": "nobody"}

    def test_unmatched_include_raises(self):
        with pytest.raises(UnresolvedIncludeError) as exc_info:
            self.parse_with("http {\n    include missing/*.conf;\n}", {})
        assert exc_info.value.pattern == "missing/*.conf"
        assert exc_info.value.line == 2

    def test_unmatched_include_can_be_ignored(self, caplog):
        with caplog.at_level(logging.WARNING, logger="nginx_conf_parser.pipeline.parser"):
            tree = self.parse_with("include missing.conf;\nuser x;", {}, ignore_include_errors=True)
        assert tree == {"user": "x"}
        assert "missing.conf" in caplog.text

    def test_error_in_included_file_names_the_file(self):
        with pytest.raises(MalformedInputError) as exc_info:
            self.parse_with("include broken.conf;", {"broken.conf": "user x;\nserver {"})
        assert exc_info.value.source == "broken.conf"

    def test_conflict_with_included_file(self):
        files = {"a.conf": "server {\n}"}
        with pytest.raises(StructuralConflictError, match="included from a.conf"):
            self.parse_with("server x;\ninclude a.conf;", files)

    def test_include_kept_without_resolver(self):
        assert parse("include mime.types;") == {"include": "mime.types"}

    def test_custom_include_keyword(self):
        files = {"a.conf": "user x;"}
        tree = self.parse_with("import a.conf;\ninclude a.conf;", files, include_keyword="import")
        assert tree == {"user": "x", "include": "a.conf"}


class TestParseErrors:
    """Tests for malformed input."""

    def test_unbalanced_closing_brace(self):
        with pytest.raises(MalformedInputError, match="Unexpected '}'") as exc_info:
            parse("listen 80;\n}")
        assert exc_info.value.line == 2

    def test_unclosed_block(self):
        with pytest.raises(MalformedInputError, match="left open"):
            parse("http {\n    server {\n        listen 80;\n")

    def test_unterminated_directive(self):
        with pytest.raises(MalformedInputError, match="Unterminated statement"):
            parse("listen 80")

    def test_error_message_includes_source(self):
        with pytest.raises(MalformedInputError) as exc_info:
            ConfParser().parse("}", source="nginx.conf")
        assert str(exc_info.value).startswith("nginx.conf:1:")

    def test_collection_value_type(self):
        tree = ConfParser().parse("listen 1;\nlisten 2;")
        assert isinstance(tree["listen"], Collection)
