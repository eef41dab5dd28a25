"""
Translation resolver tests.
Dotted key lookup, fail-soft fallback to the key, {param} interpolation,
and the catalog service's per-locale cache with English fallback.
"""
import json
import pytest

from services.translation import MessageCatalogService, resolve


CATALOG = {
    "a": {"b": {"c": "hello {name}"}},
    "admin": {
        "trial": {
            "trialActive": "Trial Active",
            "trialEndsOn": "Trial ends on {date}",
        }
    },
    "counts": {"left": "{count} of {total} left"},
    "flat": "top level",
}


class TestResolve:
    """resolve(catalog, key_path, params)."""

    def test_resolves_nested_key_with_params(self):
        """a.b.c with name=X renders 'hello X'."""
        assert resolve(CATALOG, "a.b.c", {"name": "X"}) == "hello X"

    def test_missing_leaf_returns_key(self):
        """Missing leaf returns the literal key path."""
        assert resolve(CATALOG, "a.b.missing") == "a.b.missing"

    def test_missing_intermediate_returns_key(self):
        """Missing intermediate node returns the key path."""
        assert resolve(CATALOG, "a.x.c") == "a.x.c"

    def test_walk_through_string_returns_key(self):
        """Descending into a string (not a mapping) fails soft."""
        assert resolve(CATALOG, "flat.deeper") == "flat.deeper"

    def test_sub_object_returns_key(self):
        """Stopping at a sub-object is not a translation."""
        assert resolve(CATALOG, "admin.trial") == "admin.trial"

    def test_no_params_leaves_placeholders(self):
        """Without params the template is returned as-is."""
        assert resolve(CATALOG, "a.b.c") == "hello {name}"

    def test_unmatched_placeholder_left_verbatim(self):
        """Only supplied params are replaced."""
        assert resolve(CATALOG, "counts.left", {"count": 3}) == "3 of {total} left"

    def test_params_converted_to_string(self):
        """Numbers are rendered with str()."""
        assert resolve(CATALOG, "counts.left", {"count": 2, "total": 10}) == "2 of 10 left"

    def test_none_param_keeps_placeholder(self):
        """A None value leaves the placeholder visible."""
        assert resolve(CATALOG, "a.b.c", {"name": None}) == "hello {name}"

    def test_empty_catalog_returns_key(self):
        """Empty or missing catalog fails soft."""
        assert resolve({}, "admin.trial.trialActive") == "admin.trial.trialActive"
        assert resolve(None, "admin.trial.trialActive") == "admin.trial.trialActive"

    def test_top_level_key(self):
        """Single-segment keys resolve too."""
        assert resolve(CATALOG, "flat") == "top level"

    def test_does_not_mutate_catalog(self):
        """Interpolation works on a copy; the catalog template is unchanged."""
        resolve(CATALOG, "a.b.c", {"name": "Y"})
        assert CATALOG["a"]["b"]["c"] == "hello {name}"


class TestMessageCatalogService:
    """Catalog loading, caching and English fallback."""

    @pytest.fixture
    def messages_dir(self, tmp_path):
        (tmp_path / "en.json").write_text(json.dumps({"greeting": "Hello {name}"}), encoding="utf-8")
        (tmp_path / "hi.json").write_text(json.dumps({"greeting": "नमस्ते {name}"}), encoding="utf-8")
        return tmp_path

    def test_translate_per_locale(self, messages_dir):
        """Each locale reads its own catalog."""
        service = MessageCatalogService(messages_dir)
        assert service.translate("en", "greeting", {"name": "Asha"}) == "Hello Asha"
        assert service.translate("hi", "greeting", {"name": "Asha"}) == "नमस्ते Asha"

    def test_catalog_is_cached(self, messages_dir):
        """Second load returns the cached catalog even if the file changes."""
        service = MessageCatalogService(messages_dir)
        first = service.load_locale("en")
        (messages_dir / "en.json").write_text(json.dumps({"greeting": "changed"}), encoding="utf-8")
        assert service.load_locale("en") is first

    def test_clear_cache_reloads(self, messages_dir):
        """clear_cache forces a reload from disk."""
        service = MessageCatalogService(messages_dir)
        service.load_locale("en")
        (messages_dir / "en.json").write_text(json.dumps({"greeting": "changed"}), encoding="utf-8")
        service.clear_cache()
        assert service.translate("en", "greeting") == "changed"

    def test_broken_catalog_falls_back_to_english(self, messages_dir):
        """Unparseable hi.json falls back to English."""
        (messages_dir / "hi.json").write_text("{not json", encoding="utf-8")
        service = MessageCatalogService(messages_dir)
        assert service.translate("hi", "greeting", {"name": "A"}) == "Hello A"

    def test_unsupported_locale_uses_english(self, messages_dir):
        """Unknown locale codes read the English catalog."""
        service = MessageCatalogService(messages_dir)
        assert service.translate("fr", "greeting", {"name": "A"}) == "Hello A"

    def test_missing_english_gives_empty_catalog(self, tmp_path):
        """With no catalogs at all every key fails soft."""
        service = MessageCatalogService(tmp_path)
        assert service.load_locale("en") == {}
        assert service.translate("hi", "admin.trial.trialActive") == "admin.trial.trialActive"


class TestShippedCatalogs:
    """The en/hi catalogs shipped with the backend."""

    def test_trial_keys_present_in_both_locales(self):
        """Trial banner keys exist in English and Hindi."""
        service = MessageCatalogService()
        for locale in ("en", "hi"):
            for key in (
                "admin.trial.trialActive",
                "admin.trial.trialExpired",
                "admin.trial.trialEnded",
                "admin.trial.upgradeToContinue",
                "admin.trial.convertToPaid",
                "common.left",
            ):
                assert service.translate(locale, key) != key

    def test_hindi_differs_from_english(self):
        """Hindi catalog is a real translation."""
        service = MessageCatalogService()
        assert service.translate("hi", "admin.trial.trialActive") != service.translate("en", "admin.trial.trialActive")
