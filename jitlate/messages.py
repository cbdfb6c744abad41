"""
Message-catalog translation.

Translates nested catalogs of UI strings ({"nav": {"home": "Home"}}) in one
batch per context hint, or progressively via the streaming path.

Catalogs are walked structurally, so keys containing dots ("404.title") and
lists of strings are handled. A string that needs disambiguation can carry
a context hint, which goes to the backend as context and is dropped from the
translated catalog:

    {"save": {"$t": "Save", "$ctx": "button: save file to disk"}}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Sequence, Union

from jitlate.core.models import TranslatableItem, TranslationResult
from jitlate.pipeline import StreamingDelivery
from jitlate.translator import Translator

CatalogPath = tuple[Union[str, int], ...]

TEXT_KEY = "$t"
CONTEXT_KEY = "$ctx"


# =============================================================================
# Catalog Walking
# =============================================================================


@dataclass(frozen=True)
class CatalogEntry:
    """One translatable string in a catalog."""

    path: CatalogPath
    text: str
    context: str | None = None

    @property
    def key(self) -> str:
        return format_path(self.path)

    def to_item(self) -> TranslatableItem:
        return TranslatableItem.from_text(self.text, self.context)


def is_contextual(value: Any) -> bool:
    """True for {"$t": text, "$ctx": hint} string objects."""
    return (
        isinstance(value, dict)
        and isinstance(value.get(TEXT_KEY), str)
        and isinstance(value.get(CONTEXT_KEY), str)
    )


def format_path(path: CatalogPath) -> str:
    """Display form of a path: ("nav", "items", 0, "label") -> "nav.items[0].label"."""
    key = ""
    for part in path:
        if isinstance(part, int):
            key += f"[{part}]"
        else:
            key = f"{key}.{part}" if key else str(part)
    return key


def extract_entries(catalog: Any, path: CatalogPath = ()) -> list[CatalogEntry]:
    """Every string in a catalog, in document order. Non-string leaves are skipped."""
    if isinstance(catalog, str):
        return [CatalogEntry(path, catalog)]
    if is_contextual(catalog):
        return [CatalogEntry(path, catalog[TEXT_KEY], catalog[CONTEXT_KEY])]

    entries: list[CatalogEntry] = []
    if isinstance(catalog, dict):
        for key, value in catalog.items():
            entries.extend(extract_entries(value, (*path, key)))
    elif isinstance(catalog, list):
        for index, value in enumerate(catalog):
            entries.extend(extract_entries(value, (*path, index)))
    return entries


def flatten(catalog: Any) -> dict[str, str]:
    """Flat {"nav.home": "Home", "steps[0]": "Sign up"} view of a catalog."""
    return {entry.key: entry.text for entry in extract_entries(catalog)}


def rebuild(catalog: Any, translations: dict[CatalogPath, str], path: CatalogPath = ()) -> Any:
    """
    Copy of a catalog with translations substituted by path.

    Strings without a translation keep their source text; context objects
    become plain strings.
    """
    if isinstance(catalog, str):
        return translations.get(path) or catalog
    if is_contextual(catalog):
        return translations.get(path) or catalog[TEXT_KEY]
    if isinstance(catalog, dict):
        return {key: rebuild(value, translations, (*path, key)) for key, value in catalog.items()}
    if isinstance(catalog, list):
        return [rebuild(value, translations, (*path, i)) for i, value in enumerate(catalog)]
    return catalog


def group_by_context(entries: Sequence[CatalogEntry]) -> dict[str | None, list[CatalogEntry]]:
    """Translatable entries grouped by context hint; blank strings are left out."""
    groups: dict[str | None, list[CatalogEntry]] = {}
    for entry in entries:
        if entry.text.strip():
            groups.setdefault(entry.context, []).append(entry)
    return groups


# =============================================================================
# Resolution
# =============================================================================


async def resolve_entries(
    translator: Translator,
    entries: Sequence[CatalogEntry],
    target_language: str | None = None,
    batch_size: int | None = None,
    on_progress: Callable[[int, int], None] | None = None,
) -> TranslationResult:
    """
    Translate catalog entries, one resolve call per context hint and batch.

    Returns translations keyed by each entry's to_item() fingerprint.
    on_progress(done, total) is called after every batch.
    """
    target = target_language or translator.target_language
    batches: list[tuple[str | None, list[TranslatableItem]]] = []
    for context, group in group_by_context(entries).items():
        unique = list({item.fingerprint: item for item in (e.to_item() for e in group)}.values())
        size = batch_size or len(unique)
        batches.extend((context, unique[i:i + size]) for i in range(0, len(unique), size))

    merged = TranslationResult()
    total = sum(len(batch) for _, batch in batches)
    done = 0
    for context, batch in batches:
        result = await translator.resolver.with_context(context).resolve_batch(batch, target)
        merged.translations.update(result.translations)
        merged.cached_count += result.cached_count
        merged.translated_count += result.translated_count
        done += len(batch)
        if on_progress is not None:
            on_progress(done, total)
    return merged


def translations_by_path(
    entries: Sequence[CatalogEntry],
    result: TranslationResult,
) -> dict[CatalogPath, str]:
    translations: dict[CatalogPath, str] = {}
    for entry in entries:
        value = result.get(entry.to_item().fingerprint)
        if value:
            translations[entry.path] = value
    return translations


async def translate_messages(
    translator: Translator,
    messages: Any,
    target_language: str | None = None,
) -> Any:
    """
    Translate a whole message catalog.

    Returns a new catalog; untranslated entries keep their source text.
    """
    entries = extract_entries(messages)
    result = await resolve_entries(translator, entries, target_language)
    return rebuild(messages, translations_by_path(entries, result))


async def stream_messages(
    translator: Translator,
    messages: Any,
    target_language: str | None = None,
) -> AsyncIterator[Any]:
    """
    Yield the catalog progressively.

    Each yielded catalog is a cumulative snapshot: source text everywhere,
    translations filled in as they arrive.
    """
    target = target_language or translator.target_language
    translated: dict[CatalogPath, str] = {}

    for context, group in group_by_context(extract_entries(messages)).items():
        streamer = StreamingDelivery(
            translator.resolver.with_context(context),
            buffer_window=translator.streamer.buffer_window,
        )
        async for chunk in streamer.stream([entry.to_item() for entry in group], target):
            for event in chunk.events:
                translated[group[event.index].path] = event.translation
            yield rebuild(messages, translated)
