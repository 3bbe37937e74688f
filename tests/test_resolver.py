"""Tests for inheritance resolution through the engine."""

import json
import logging

import pytest

from termtheme.errors import CyclicInheritance, UnresolvedReference
from termtheme.theme_engine import MappingSource, Palette, ThemeEngine
from termtheme.theme_engine.resolver import ResolutionContext
from termtheme.theme_engine.schema import rgb

from conftest import make_theme


class TestExtends:
    """Test single-parent inheritance."""

    def test_child_overrides_only_declared_slots(self, engine, write_doc):
        write_doc("base.json", make_theme("base", palette={
            "primary": {"hex": "#aa0000"},
            "background": {"hex": "#000000"},
            "text": {"hex": "#ffffff"},
            "border": {"hex": "#444444"},
            "accent": {"hex": "#00aa00"},
        }))
        child_path = write_doc("child.json", {
            "name": "child",
            "description": "child theme",
            "extends": "base.json",
            "palette": {"primary": {"hex": "#0000aa"}},
        })

        theme = engine.load_theme(child_path)

        assert theme.palette.primary == rgb(0, 0, 170)
        assert theme.palette.background == rgb(0, 0, 0)
        assert theme.palette.border == rgb(68, 68, 68)
        assert theme.palette.get("accent") == rgb(0, 170, 0)

    def test_missing_parent_degrades_to_defaults(self, engine, write_doc, caplog):
        path = write_doc("child.json", {
            "name": "child", "description": "d", "extends": "nowhere.json",
            "palette": {"primary": {"hex": "#0000aa"}},
        })
        with caplog.at_level(logging.WARNING):
            theme = engine.load_theme(path)
        assert "Failed to extend theme 'nowhere.json'" in caplog.text
        assert theme.palette.primary == rgb(0, 0, 170)
        assert theme.palette.background == Palette().background

    def test_undecodable_parent_degrades_to_defaults(self, engine, write_doc, tmp_path, caplog):
        (tmp_path / "base.json").write_bytes(b'{"name": "\xff"}')
        path = write_doc("child.json", {"name": "child", "description": "d",
                                        "extends": "base.json"})
        with caplog.at_level(logging.WARNING):
            theme = engine.load_theme(path)
        assert "Failed to extend theme 'base.json'" in caplog.text
        assert theme.name == "child"
        assert theme.palette.slots() == Palette().slots()

    def test_grandparent_chain(self, engine, write_doc):
        write_doc("a.json", make_theme("a", palette={
            "primary": {"hex": "#010101"}, "background": {"hex": "#020202"},
            "text": {"hex": "#030303"}, "border": {"hex": "#040404"},
        }))
        write_doc("b.json", {"name": "b", "description": "d", "extends": "a.json",
                             "palette": {"text": {"hex": "#0a0a0a"}}})
        path = write_doc("sub/c.json", {"name": "c", "description": "d",
                                        "extends": "../b.json",
                                        "palette": {"border": {"hex": "#0b0b0b"}}})
        theme = engine.load_theme(path)
        assert theme.palette.primary == rgb(1, 1, 1)
        assert theme.palette.text == rgb(10, 10, 10)
        assert theme.palette.border == rgb(11, 11, 11)

    def test_parent_is_cached_and_shared(self, engine, write_doc):
        base = write_doc("base.json", make_theme("base"))
        child = write_doc("child.json", {"name": "child", "description": "d",
                                         "extends": "base.json"})
        engine.load_theme(child)
        assert str(base) in engine.cache
        assert engine.load_theme(base) is engine.cache.get(str(base))


class TestImports:
    """Test imported palettes exposed as named colors."""

    def test_import_aliases(self, engine, write_doc):
        write_doc("brand.json", make_theme("brand", palette={
            "primary": {"hex": "#123456"}, "background": {"hex": "#000000"},
            "text": {"hex": "#ffffff"}, "border": {"hex": "#444444"},
        }))
        path = write_doc("app.json", make_theme("app", imports=["brand.json"], palette={
            "primary": {"name": "brand.primary"},
            "background": {"name": "brand.surface"},
            "text": {"hex": "#ffffff"},
            "border": {"hex": "#444444"},
        }))
        theme = engine.load_theme(path)
        assert theme.palette.primary == rgb(0x12, 0x34, 0x56)
        assert theme.palette.background == Palette().surface

    def test_import_aliases_do_not_leak(self, engine, write_doc, caplog):
        write_doc("brand.json", make_theme("brand"))
        write_doc("app.json", make_theme("app", imports=["brand.json"]))
        other = write_doc("other.json", make_theme("other", palette={
            "primary": {"name": "brand.primary"}, "background": {"hex": "#000000"},
            "text": {"hex": "#ffffff"}, "border": {"hex": "#444444"},
        }))
        engine.load_theme(write_doc("app2.json", make_theme("app2", imports=["brand.json"])))
        with caplog.at_level(logging.WARNING):
            theme = engine.load_theme(other)
        assert "unknown named color 'brand.primary'" in caplog.text
        assert theme.palette.primary == Palette().primary

    def test_broken_import_is_skipped(self, engine, write_doc, caplog):
        path = write_doc("app.json", make_theme("app", imports=["missing.json"]))
        with caplog.at_level(logging.WARNING):
            theme = engine.load_theme(path)
        assert "Failed to import theme 'missing.json'" in caplog.text
        assert theme.name == "app"

    def test_undecodable_import_is_skipped(self, engine, write_doc, tmp_path, caplog):
        (tmp_path / "brand.json").write_bytes(b"\xff\xfe{}")
        path = write_doc("app.json", make_theme("app", imports=["brand.json"]))
        with caplog.at_level(logging.WARNING):
            theme = engine.load_theme(path)
        assert "Failed to import theme 'brand.json'" in caplog.text
        assert theme.palette.primary == rgb(0x11, 0x22, 0x33)


class TestSemanticResolution:
    """Test semantic maps after the palette merge."""

    def test_declared_roles_win(self, engine, write_doc):
        path = write_doc("t.json", make_theme(semantic={
            "panelBackground": "background",
            "panelBorder": "border",
            "panelTitle": "primary",
            "panelContent": "text",
        }))
        theme = engine.load_theme(path)
        assert theme.semantic["panelTitle"] == "primary"
        assert theme.semantic["buttonText"] == "textInverse"

    def test_custom_slot_from_parent(self, engine, write_doc):
        write_doc("base.json", make_theme("base", palette={
            "primary": {"hex": "#000001"}, "background": {"hex": "#000002"},
            "text": {"hex": "#000003"}, "border": {"hex": "#000004"},
            "accent": {"hex": "#000005"},
        }))
        path = write_doc("child.json", {
            "name": "child", "description": "d", "extends": "base.json",
            "semantic": {"panelBackground": "surface", "panelBorder": "border",
                         "panelTitle": "accent", "panelContent": "text"},
        })
        theme = engine.load_theme(path)
        assert theme.semantic_color("panelTitle") == rgb(0, 0, 5)

    def test_unresolved_after_merge(self, engine, write_doc):
        path = write_doc("child.json", {
            "name": "child", "description": "d", "extends": "missing.json",
            "semantic": {"panelBackground": "surface", "panelBorder": "border",
                         "panelTitle": "ghost", "panelContent": "text"},
        })
        with pytest.raises(UnresolvedReference) as exc_info:
            engine.load_theme(path)
        assert exc_info.value.errors == [
            "Semantic mapping 'panelTitle' references unknown palette color 'ghost'"
        ]


class TestCycles:
    """Test cycle and depth detection."""

    def test_extends_cycle(self, engine, write_doc):
        write_doc("a.json", {"name": "a", "description": "d", "extends": "b.json"})
        path = write_doc("b.json", {"name": "b", "description": "d", "extends": "a.json"})
        with pytest.raises(CyclicInheritance) as exc_info:
            engine.load_theme(path)
        chain = exc_info.value.chain
        assert chain[0] == chain[-1]
        assert len(engine.cache) == 0

    def test_self_import(self, engine, write_doc):
        path = write_doc("self.json", make_theme("self", imports=["self.json"]))
        with pytest.raises(CyclicInheritance):
            engine.load_theme(path)

    def test_depth_limit(self, write_doc):
        documents = {}
        for i in range(5):
            documents[f"t{i}.json"] = json.dumps(
                {"name": f"t{i}", "description": "d", "extends": f"t{i + 1}.json"}
            )
        documents["t5.json"] = json.dumps(make_theme("t5"))
        engine = ThemeEngine(source=MappingSource(documents), max_inheritance_depth=3)
        with pytest.raises(CyclicInheritance, match="deeper than 3 levels"):
            engine.load_theme("t0.json")


class TestResolutionContext:
    """Test the immutable resolution state."""

    def test_enter_does_not_mutate(self):
        root = ResolutionContext.root("/a", "/")
        child = root.enter("/b", "/")
        assert root.resolving == frozenset(["/a"])
        assert child.resolving == frozenset(["/a", "/b"])
        assert child.chain == ("/a", "/b")
        assert child.depth == 2
