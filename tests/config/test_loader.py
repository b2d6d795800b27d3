"""Tests for recursive config loading."""

import pytest
from pathlib import Path

from rrr.config.loader import ConfigLoader, default_config_paths, load_rule_book
from rrr.config.models import AliasRef, Command, Glob, Imported, Regex
from rrr.exceptions import (
    ConfigError,
    ConfigSyntaxError,
    ImportUnavailableError,
    ProfileError,
    UnresolvedAliasError,
)


def commands(rule_set, input):
    return [rule.command for rule in rule_set.matches(input)]


class TestLoadBasics:
    """Tests for ConfigLoader.load with a single file."""

    def test_default_profile_always_exists(self):
        book = ConfigLoader().build()
        assert "default" in book
        assert len(book.profile("default")) == 0

    def test_aliases_and_rules(self, write_config):
        path = write_config(
            """
viewer = zathura
*.pdf -> @viewer
~^https?:// -> firefox
"""
        )
        loader = ConfigLoader().load(path)
        builder = loader.builders["default"]

        assert builder.aliases == {"viewer": "zathura"}
        assert [r.pattern for r in builder.glob_rules] == [Glob("*.pdf")]
        assert [r.pattern for r in builder.regex_rules] == [Regex("^https?://")]
        assert builder.glob_rules[0].action == AliasRef("viewer")
        assert builder.glob_rules[0].config_origin.line == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader().load(tmp_path / "missing.conf")
        assert "Cannot load configuration file" in exc_info.value.message

    def test_syntax_error(self, write_config):
        path = write_config("*.pdf -> zathura\n:bogus directive\n")
        with pytest.raises(ConfigSyntaxError) as exc_info:
            ConfigLoader().load(path)
        assert "Invalid meta ':bogus directive'" in exc_info.value.message
        assert ":2:1" in exc_info.value.message

    def test_invalid_alias_in_match(self, write_config):
        path = write_config("*.pdf -> @not valid\n")
        with pytest.raises(ConfigSyntaxError) as exc_info:
            ConfigLoader().load(path)
        assert "Invalid alias '@not valid'" in exc_info.value.message

    def test_alias_forward_reference(self, write_config):
        path = write_config("*.pdf -> @viewer\nviewer = zathura\n")
        book = ConfigLoader().load(path).build()
        assert commands(book.profile(), "a.pdf") == ["zathura"]

    def test_alias_last_definition_wins(self, write_config):
        path = write_config("viewer = evince\n*.pdf -> @viewer\nviewer = zathura\n")
        book = ConfigLoader().load(path).build()
        assert commands(book.profile(), "a.pdf") == ["zathura"]

    def test_unresolved_alias_fails_build(self, write_config):
        path = write_config("*.pdf -> @viewer\n")
        loader = ConfigLoader().load(path)
        with pytest.raises(UnresolvedAliasError) as exc_info:
            loader.build()
        assert "'viewer'" in exc_info.value.message
        assert "'default'" in exc_info.value.message


class TestInclude:
    """Tests for :include."""

    def test_include_file(self, write_config):
        write_config("*.txt -> cat\n", name="extra.conf")
        main = write_config(":include extra.conf\n*.md -> glow\n", name="main.conf")

        book = ConfigLoader().load(main).build()
        assert commands(book.profile(), "a.txt") == ["cat"]
        assert commands(book.profile(), "a.md") == ["glow"]

    def test_relative_include_follows_declaring_file(self, tmp_path, write_config, monkeypatch):
        write_config("*.txt -> cat\n", name="sub/extra.conf")
        write_config(":include extra.conf\n", name="sub/mid.conf")
        main = write_config(":include sub/mid.conf\n", name="main.conf")
        monkeypatch.chdir("/")

        book = ConfigLoader().load(main).build()
        assert commands(book.profile(), "a.txt") == ["cat"]

    def test_include_directory_in_name_order(self, tmp_path, write_config):
        write_config("*.x -> first\n", name="conf.d/10-first.conf")
        write_config("*.x -> second\n", name="conf.d/20-second.conf")
        main = write_config(f":include {tmp_path / 'conf.d'}\n", name="main.conf")

        book = ConfigLoader().load(main).build()
        # last declared wins
        assert commands(book.profile(), "a.x") == ["second", "first"]

    def test_include_expands_env(self, monkeypatch, tmp_path, write_config):
        monkeypatch.setenv("RRR_TEST_CONF", str(tmp_path))
        write_config("*.txt -> cat\n", name="extra.conf")
        main = write_config(":include $RRR_TEST_CONF/extra.conf\n", name="main.conf")

        book = ConfigLoader().load(main).build()
        assert commands(book.profile(), "a.txt") == ["cat"]

    def test_include_missing_target(self, tmp_path, write_config):
        main = write_config(f":include {tmp_path / 'nope.conf'}\n", name="main.conf")
        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader().load(main)
        assert "Cannot include" in exc_info.value.message

    def test_self_include_is_idempotent(self, tmp_path):
        main = tmp_path / "main.conf"
        main.write_text(f":include {main}\n*.txt -> cat\n")

        loader = ConfigLoader().load(main)
        assert len(loader.builders["default"].glob_rules) == 1

    def test_include_cycle(self, tmp_path):
        a = tmp_path / "a.conf"
        b = tmp_path / "b.conf"
        a.write_text(f":include {b}\n*.a -> A\n")
        b.write_text(f":include {a}\n*.b -> B\n")

        loader = ConfigLoader().load(a)
        patterns = [r.pattern for r in loader.builders["default"].glob_rules]
        assert patterns == [Glob("*.b"), Glob("*.a")]

    def test_loading_same_file_twice(self, write_config):
        path = write_config("*.txt -> cat\n")
        loader = ConfigLoader().load(path).load(path)
        assert len(loader.builders["default"]) == 1


class TestProfiles:
    """Tests for :profile handling."""

    def test_profile_switch(self, write_config):
        path = write_config(
            """
*.pdf -> evince
:profile work
*.pdf -> okular
"""
        )
        book = ConfigLoader().load(path).build()
        assert commands(book.profile("default"), "a.pdf") == ["evince"]
        assert commands(book.profile("work"), "a.pdf") == ["okular"]

    def test_aliases_are_per_profile(self, write_config):
        path = write_config(
            """
viewer = evince
:profile work
*.pdf -> @viewer
"""
        )
        loader = ConfigLoader().load(path)
        with pytest.raises(UnresolvedAliasError) as exc_info:
            loader.build()
        assert "'work'" in exc_info.value.message

    def test_switching_back_to_default(self, write_config):
        path = write_config(":profile work\n:profile default\n*.pdf -> evince\n")
        book = ConfigLoader().load(path).build()
        assert commands(book.profile("default"), "a.pdf") == ["evince"]
        assert len(book.profile("work")) == 0

    def test_unknown_profile(self):
        with pytest.raises(ProfileError):
            ConfigLoader().build().profile("nope")

    def test_profile_restored_after_include(self, write_config):
        write_config(":profile work\n*.doc -> libreoffice\n", name="work.conf")
        main = write_config(":include work.conf\n*.pdf -> evince\n", name="main.conf")

        book = ConfigLoader().load(main).build()
        assert commands(book.profile("work"), "a.doc") == ["libreoffice"]
        assert commands(book.profile("work"), "a.pdf") == []
        assert commands(book.profile("default"), "a.pdf") == ["evince"]

    def test_included_file_starts_in_including_profile(self, write_config):
        write_config("*.doc -> libreoffice\n", name="docs.conf")
        main = write_config(":profile work\n:include docs.conf\n", name="main.conf")

        book = ConfigLoader().load(main).build()
        assert commands(book.profile("work"), "a.doc") == ["libreoffice"]
        assert commands(book.profile("default"), "a.doc") == []

    def test_each_top_level_file_starts_in_default(self, write_config):
        first = write_config(":profile work\n", name="first.conf")
        second = write_config("*.pdf -> evince\n", name="second.conf")

        book = ConfigLoader().load(first).load(second).build()
        assert commands(book.profile("default"), "a.pdf") == ["evince"]


class TestProfileFilter:
    """Tests for only_profiles."""

    CONFIG = """
viewer = evince
*.pdf -> @viewer
:profile work
*.pdf -> @missing
*.doc -> libreoffice
"""

    def test_excluded_profile_has_no_rules(self, write_config):
        path = write_config(self.CONFIG)
        book = ConfigLoader(only_profiles=["default"]).load(path).build()

        assert commands(book.profile("default"), "a.pdf") == ["evince"]
        assert len(book.profile("work")) == 0

    def test_excluded_default(self, write_config):
        path = write_config("*.pdf -> evince\n:profile work\n*.doc -> libreoffice\n")
        book = ConfigLoader(only_profiles=["work"]).load(path).build()

        assert len(book.profile("default")) == 0
        assert commands(book.profile("work"), "a.doc") == ["libreoffice"]

    def test_excluded_profile_lines_still_parsed(self, write_config):
        path = write_config(":profile work\n:bogus\n")
        with pytest.raises(ConfigSyntaxError):
            ConfigLoader(only_profiles=["default"]).load(path)


class TestImport:
    """Tests for :import of desktop entries."""

    def test_import_file(self, tmp_path, write_config, desktop_file):
        entry = desktop_file(exec_line="zathura %U", mime_types="application/pdf;")
        main = write_config(f":import {entry}\n", name="main.conf")

        loader = ConfigLoader().load(main)
        rules = loader.builders["default"].glob_rules
        assert Glob("*.pdf") in [r.pattern for r in rules]
        assert all(r.action == Command("zathura %s") for r in rules)
        assert all(r.rule_origin == Imported(str(entry)) for r in rules)
        assert rules[0].config_origin.line == 1

    def test_import_directory_skips_other_files(self, tmp_path, write_config, desktop_file):
        apps = tmp_path / "apps"
        desktop_file(directory=apps)
        (apps / "README").write_text("not a desktop file")
        main = write_config(f":import {apps}\n", name="main.conf")

        book = ConfigLoader().load(main).build()
        assert "zathura %s" in commands(book.profile(), "paper.pdf")

    def test_import_disabled(self, write_config, desktop_file):
        entry = desktop_file()
        main = write_config(f":import {entry}\n", name="main.conf")
        with pytest.raises(ImportUnavailableError):
            ConfigLoader(allow_import=False).load(main)

    def test_import_skipped_for_excluded_profile(self, write_config, desktop_file):
        entry = desktop_file()
        main = write_config(f":profile work\n:import {entry}\n", name="main.conf")

        loader = ConfigLoader(only_profiles=["default"]).load(main)
        assert len(loader.builders["work"]) == 0

    def test_imported_rules_lose_to_later_rules(self, write_config, desktop_file):
        entry = desktop_file()
        main = write_config(f":import {entry}\n*.pdf -> evince\n", name="main.conf")

        book = ConfigLoader().load(main).build()
        assert book.profile().match_one("a.pdf").command == "evince"


class TestLoadRuleBook:
    """Tests for load_rule_book and default paths."""

    def test_default_paths(self, mock_home_dir):
        paths = default_config_paths()
        assert paths[-1] == mock_home_dir / ".config" / "rrr.conf"
        assert paths[0].name == "rrr.conf"

    def test_explicit_paths(self, write_config):
        a = write_config("*.a -> A\n", name="a.conf")
        b = write_config("*.b -> B\n", name="b.conf")
        book = load_rule_book([a, b])
        assert commands(book.profile(), "x.a") == ["A"]
        assert commands(book.profile(), "x.b") == ["B"]

    def test_no_default_files(self, mocker, tmp_path):
        mocker.patch(
            "rrr.config.loader.default_config_paths",
            return_value=[tmp_path / "etc.conf", tmp_path / "home.conf"],
        )
        with pytest.raises(ConfigError) as exc_info:
            load_rule_book()
        assert "could be loaded" in exc_info.value.message

    def test_existing_default_files_loaded(self, mocker, tmp_path):
        home = tmp_path / "home.conf"
        home.write_text("*.txt -> cat\n")
        mocker.patch(
            "rrr.config.loader.default_config_paths",
            return_value=[tmp_path / "etc.conf", home],
        )
        book = load_rule_book()
        assert commands(book.profile(), "a.txt") == ["cat"]

    def test_case_sensitive(self, write_config):
        path = write_config("*.TXT -> cat\n")
        assert load_rule_book([path], case_insensitive=False).profile().match_one("a.txt") is None
        assert load_rule_book([path]).profile().match_one("a.txt") is not None
