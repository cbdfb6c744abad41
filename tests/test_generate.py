"""
Tests for translation file generation.
"""

import json

import pytest

from jitlate.config import TranslationConfig
from jitlate.core.errors import ConfigurationError
from jitlate.generate import (
    build_parser,
    estimate_tokens,
    generate_translations,
    load_catalog,
    main,
    plan_generation,
    split_list,
    target_languages,
)
from jitlate.messages import extract_entries
from jitlate.translator import Translator

from conftest import RecordingProvider


CATALOG = {
    "nav": {"home": "Home", "cart": "Cart"},
    "errors": {"404.title": "Not found"},
    "steps": ["Sign up", "Pay"],
    "save": {"$t": "Save", "$ctx": "button: save file to disk"},
    "count": 3,
}


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "en.json"
    path.write_text(json.dumps(CATALOG), encoding="utf-8")
    return path


@pytest.fixture
def translator(provider, cache):
    return Translator(TranslationConfig(target_language="es"), provider=provider, cache=cache)


def read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))


# =============================================================================
# Helper Tests
# =============================================================================


class TestHelpers:
    def test_split_list(self):
        assert split_list(" es, fr,,de ") == ["es", "fr", "de"]
        assert split_list(None) == []

    def test_target_languages_normalized_and_deduped(self):
        assert target_languages(["es-MX", "ES_mx", "fr"]) == ["es_MX", "fr"]

    def test_unknown_language_warns(self, capsys):
        assert target_languages(["xx"]) == ["xx"]
        assert "not in the supported list" in capsys.readouterr().out

    def test_estimate_tokens(self):
        entries = extract_entries({"a": "abcdefgh", "b": "abc"})

        assert estimate_tokens(entries, 3) == (3, 18)

    def test_load_catalog_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_catalog(tmp_path / "missing.json")

    def test_load_catalog_invalid(self, tmp_path):
        path = tmp_path / "en.json"
        path.write_text("{nope", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_catalog(path)


# =============================================================================
# Generation Tests
# =============================================================================


class TestGenerate:
    @pytest.mark.asyncio
    async def test_nested_output(self, translator, source):
        stats = await generate_translations(translator, source, ["fr"])

        assert read_json(source.parent / "fr.json") == {
            "nav": {"home": "fr:Home", "cart": "fr:Cart"},
            "errors": {"404.title": "fr:Not found"},
            "steps": ["fr:Sign up", "fr:Pay"],
            "save": "fr:Save",
            "count": 3,
        }
        assert [s.language for s in stats] == ["fr"]
        assert stats[0].total_strings == 6
        assert stats[0].translated_strings == 6
        assert stats[0].output_file == source.parent / "fr.json"

    @pytest.mark.asyncio
    async def test_flat_output(self, translator, source, tmp_path):
        out = tmp_path / "dist" / "i18n"

        await generate_translations(translator, source, ["de"], output_dir=out, flat=True)

        assert read_json(out / "de.json") == {
            "nav.home": "de:Home",
            "nav.cart": "de:Cart",
            "errors.404.title": "de:Not found",
            "steps[0]": "de:Sign up",
            "steps[1]": "de:Pay",
            "save": "de:Save",
        }

    @pytest.mark.asyncio
    async def test_context_sent_as_hint_not_in_text(self, translator, provider, source):
        await generate_translations(translator, source, ["fr"])

        sent = [text for texts, _ in provider.calls for text in texts]
        assert "Save" in sent
        assert not any("button" in text for text in sent)
        hinted = [h for h in provider.hints if h["context"] == "button: save file to disk"]
        assert len(hinted) == 1

    @pytest.mark.asyncio
    async def test_one_file_per_language(self, translator, provider, source):
        stats = await generate_translations(translator, source, ["es-MX", "ar"])

        assert (source.parent / "es_MX.json").exists()
        assert (source.parent / "ar.json").exists()
        assert {lang for _, lang in provider.calls} == {"es_MX", "ar"}
        assert len(stats) == 2

    @pytest.mark.asyncio
    async def test_second_run_served_from_cache(self, translator, provider, source):
        await generate_translations(translator, source, ["fr"])
        calls = len(provider.calls)

        stats = await generate_translations(translator, source, ["fr"])

        assert len(provider.calls) == calls
        assert stats[0].cached_strings == 6
        assert stats[0].translated_strings == 0

    @pytest.mark.asyncio
    async def test_batches(self, translator, provider, tmp_path):
        path = tmp_path / "en.json"
        path.write_text(json.dumps({f"k{i}": f"Text {i}" for i in range(5)}), encoding="utf-8")

        await generate_translations(translator, path, ["fr"], batch_size=2)

        assert [len(texts) for texts, _ in provider.calls] == [2, 2, 1]

    @pytest.mark.asyncio
    async def test_failed_language_skipped(self, cache, source):
        class FrenchDown(RecordingProvider):
            async def translate(self, texts, target_language, **hints):
                if target_language == "fr":
                    raise RuntimeError("quota exceeded")
                return await super().translate(texts, target_language, **hints)

        translator = Translator(TranslationConfig(target_language="es"), provider=FrenchDown(), cache=cache)

        stats = await generate_translations(translator, source, ["fr", "de"])

        assert [s.language for s in stats] == ["de"]
        assert not (source.parent / "fr.json").exists()
        assert (source.parent / "de.json").exists()


# =============================================================================
# Dry Run / CLI Tests
# =============================================================================


class TestDryRun:
    def test_plan_writes_nothing(self, source, capsys):
        per_language, total = plan_generation(source, ["es", "fr"])

        chars = len("HomeCartNot foundSign upPaySave")
        assert per_language == -(-chars // 4)
        assert total == per_language * 2 * 2
        assert not (source.parent / "es.json").exists()

        out = capsys.readouterr().out
        assert f"Would generate: {source.parent / 'es.json'}" in out
        assert "Spanish" in out

    def test_cli_dry_run(self, source, capsys):
        assert main(["-i", str(source), "-l", "es,fr", "--dry-run"]) == 0

        assert "Estimated usage" in capsys.readouterr().out
        assert not (source.parent / "fr.json").exists()

    def test_cli_missing_input(self, tmp_path):
        assert main(["-i", str(tmp_path / "missing.json"), "-l", "es", "--dry-run"]) == 1


class TestCLI:
    def test_parser(self):
        args = build_parser().parse_args([
            "-i", "messages/en.json", "-o", "out", "-l", "es,fr",
            "-c", "Photo editor", "-e", "Acme,Pro", "--flat", "-v",
        ])

        assert args.input == "messages/en.json"
        assert args.output == "out"
        assert split_list(args.languages) == ["es", "fr"]
        assert args.context == "Photo editor"
        assert split_list(args.exclude) == ["Acme", "Pro"]
        assert args.flat
        assert args.verbose
        assert not args.dry_run

    def test_input_and_languages_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["-l", "es"])
        with pytest.raises(SystemExit):
            build_parser().parse_args(["-i", "en.json"])
