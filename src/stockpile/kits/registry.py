"""Kit registry: built-in and custom kits plus the current selection."""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from stockpile.categories import CategoryCatalog
from stockpile.constants import CUSTOM_KIT_PREFIX, DEFAULT_KIT_ID
from stockpile.engine.overrides import OverrideTracker
from stockpile.kits.builtin import BUILTIN_KITS
from stockpile.kits.categories import valid_category_ids
from stockpile.kits.issues import ValidationIssue
from stockpile.kits.validation import (
    KitFileError,
    KitParseError,
    build_kit_file,
    load_kit_file,
    validate_kit_file,
)
from stockpile.metrics import KIT_OPERATIONS
from stockpile.models.kit import (
    KitFile,
    KitItem,
    KitMeta,
    KitSummary,
    UploadedKit,
    is_custom_kit_id,
)

logger = logging.getLogger(__name__)

_EDITABLE_META_FIELDS = {"name", "version", "description", "source", "language"}
_EDITABLE_ITEM_FIELDS = set(KitItem.model_fields)


@dataclass(frozen=True)
class UploadResult:
    """Outcome of :meth:`KitRegistry.upload_kit`; ``kit_id`` is set on success."""

    valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    kit_id: Optional[str] = None


def _record(operation: str, ok: bool) -> bool:
    KIT_OPERATIONS.labels(operation=operation, outcome="ok" if ok else "rejected").inc()
    return ok


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KitRegistry:
    """
    Resolves the selected kit and manages custom kits.

    Invalid operations (unknown ids, edits to a built-in kit) log a warning and
    return ``False`` instead of raising.
    """

    def __init__(
        self,
        overrides: OverrideTracker,
        categories: CategoryCatalog,
        *,
        builtin_kits: Mapping[str, KitFile] = BUILTIN_KITS,
        uploaded_kits: Iterable[UploadedKit] = (),
        selected_kit_id: str = DEFAULT_KIT_ID,
    ) -> None:
        if DEFAULT_KIT_ID not in builtin_kits:
            raise ValueError(f"Built-in kits must include the default kit '{DEFAULT_KIT_ID}'")
        self._overrides = overrides
        self._categories = categories
        self._builtin = dict(builtin_kits)
        self._uploaded: list[UploadedKit] = list(uploaded_kits)
        self._selected = selected_kit_id

    # Resolution

    def _find_uploaded(self, kit_id: str) -> Optional[UploadedKit]:
        return next((kit for kit in self._uploaded if kit.id == kit_id), None)

    def _resolve(self, kit_id: str) -> Optional[KitFile]:
        if kit_id in self._builtin:
            return self._builtin[kit_id]
        uploaded = self._find_uploaded(kit_id)
        return uploaded.file if uploaded is not None else None

    @property
    def selected_kit_id(self) -> str:
        """The selected id, or the default kit when the selection is stale."""

        if self._resolve(self._selected) is None:
            return DEFAULT_KIT_ID
        return self._selected

    @property
    def uploaded_kits(self) -> list[UploadedKit]:
        return list(self._uploaded)

    def is_builtin(self, kit_id: str) -> bool:
        return kit_id in self._builtin

    def active_kit(self) -> KitFile:
        kit = self._resolve(self._selected)
        return kit if kit is not None else self._builtin[DEFAULT_KIT_ID]

    def recommended_items(self) -> list[KitItem]:
        return list(self.active_kit().items)

    def get_kit(self, kit_id: str) -> Optional[KitFile]:
        return self._resolve(kit_id)

    def available_kits(self) -> list[KitSummary]:
        summaries = [
            KitSummary(
                id=kit_id,
                name=kit.meta.name,
                version=kit.meta.version,
                description=kit.meta.description,
                item_count=len(kit.items),
                is_builtin=True,
            )
            for kit_id, kit in self._builtin.items()
        ]
        summaries.extend(
            KitSummary(
                id=kit.id,
                name=kit.file.meta.name,
                version=kit.file.meta.version,
                description=kit.file.meta.description,
                item_count=len(kit.file.items),
                is_builtin=False,
                forked_from=kit.forked_from,
            )
            for kit in self._uploaded
        )
        return summaries

    # Selection

    def _switch_to(self, kit_id: str) -> None:
        kit = self._resolve(kit_id)
        assert kit is not None
        self._selected = kit_id
        self._overrides.enable_all_recommendations()
        self._categories.apply_kit(kit_id, kit)
        logger.info("Selected kit %s", kit_id, extra={"kit_id": kit_id})

    def select_kit(self, kit_id: str) -> bool:
        """Select ``kit_id``; a real change resets kit-specific overrides."""

        if self._resolve(kit_id) is None:
            logger.warning("Cannot select unknown kit %s", kit_id, extra={"kit_id": kit_id})
            return _record("select", False)
        if kit_id != self.selected_kit_id:
            self._switch_to(kit_id)
        else:
            self._selected = kit_id
        return _record("select", True)

    # Custom kits

    def upload_kit(self, candidate: object) -> UploadResult:
        """Validate and store a custom kit. Nothing changes when validation fails."""

        if isinstance(candidate, KitFile):
            candidate = candidate.to_wire()
        result = validate_kit_file(candidate)
        if not result.valid:
            logger.warning("Rejected kit upload: %s", result.summary())
            _record("upload", False)
            return UploadResult(valid=False, errors=result.errors, warnings=result.warnings)

        assert isinstance(candidate, Mapping)
        kit_id = f"{CUSTOM_KIT_PREFIX}{uuid.uuid4().hex}"
        self._uploaded.append(
            UploadedKit(id=kit_id, file=build_kit_file(candidate, result), uploaded_at=_utcnow())
        )
        logger.info("Uploaded kit %s", kit_id, extra={"kit_id": kit_id})
        _record("upload", True)
        return UploadResult(valid=True, warnings=result.warnings, kit_id=kit_id)

    def import_kit_text(self, text: Union[str, bytes]) -> UploadResult:
        """Upload raw kit JSON; malformed JSON raises :class:`KitParseError`."""

        try:
            data = json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            _record("upload", False)
            raise KitParseError(f"Failed to parse kit JSON: {exc}") from exc
        return self.upload_kit(data)

    def delete_kit(self, kit_id: str) -> bool:
        if kit_id in self._builtin:
            logger.warning("Cannot delete built-in kit %s", kit_id, extra={"kit_id": kit_id})
            return _record("delete", False)
        if self._find_uploaded(kit_id) is None:
            logger.warning("Cannot delete unknown kit %s", kit_id, extra={"kit_id": kit_id})
            return _record("delete", False)

        was_selected = self._selected == kit_id
        self._uploaded = [kit for kit in self._uploaded if kit.id != kit_id]
        if was_selected:
            self._switch_to(DEFAULT_KIT_ID)
        logger.info("Deleted kit %s", kit_id, extra={"kit_id": kit_id})
        return _record("delete", True)

    def fork_builtin(self) -> str:
        """Copy the active built-in kit into a new selected custom kit."""

        current = self.selected_kit_id
        if is_custom_kit_id(current):
            return current

        source = self.active_kit()
        kit_id = f"{CUSTOM_KIT_PREFIX}{uuid.uuid4().hex}"
        self._uploaded.append(
            UploadedKit(
                id=kit_id,
                file=source.model_copy(
                    update={"meta": source.meta.model_copy(update={"created_at": _utcnow().isoformat()})}
                ),
                uploaded_at=_utcnow(),
                forked_from=current,
            )
        )
        self._switch_to(kit_id)
        _record("fork", True)
        return kit_id

    # Editing the selected custom kit

    def _editable(self, operation: str) -> Optional[UploadedKit]:
        kit_id = self.selected_kit_id
        uploaded = self._find_uploaded(kit_id)
        if uploaded is None:
            logger.warning(
                "Cannot %s on built-in kit %s", operation, kit_id, extra={"kit_id": kit_id}
            )
        return uploaded

    def _replace_file(self, uploaded: UploadedKit, kit: KitFile) -> None:
        replacement = uploaded.model_copy(update={"file": kit})
        self._uploaded = [replacement if k.id == uploaded.id else k for k in self._uploaded]

    def update_meta(self, **changes: Any) -> bool:
        uploaded = self._editable("update_meta")
        if uploaded is None:
            return _record("update_meta", False)
        unknown = set(changes) - _EDITABLE_META_FIELDS
        if unknown:
            logger.warning("Unknown kit meta fields: %s", ", ".join(sorted(unknown)))
            return _record("update_meta", False)
        try:
            meta = KitMeta.model_validate({**uploaded.file.meta.model_dump(), **changes})
        except ValidationError as exc:
            logger.warning("Rejected kit meta update: %s", exc, extra={"kit_id": uploaded.id})
            return _record("update_meta", False)
        if not meta.name.strip() or not meta.version.strip():
            logger.warning("Kit name and version cannot be empty", extra={"kit_id": uploaded.id})
            return _record("update_meta", False)
        self._replace_file(uploaded, uploaded.file.model_copy(update={"meta": meta}))
        return _record("update_meta", True)

    def _category_allowed(self, kit: KitFile, category_id: str) -> bool:
        return category_id in valid_category_ids(c.id for c in kit.categories)

    def _revalidated(self, kit: KitFile, items: list[KitItem], item_id: str) -> Optional[KitFile]:
        """Run the kit file rules over an edited item list.

        The stored kit is rebuilt from its wire form so that it equals what an
        export followed by an import (or a reload from storage) produces.
        """

        wire = {**kit.to_wire(), "items": [item.to_wire() for item in items]}
        result = validate_kit_file(wire)
        if not result.valid:
            logger.warning("Rejected kit edit: %s", result.summary(), extra={"item_id": item_id})
            return None
        return build_kit_file(wire, result)

    def add_item(self, item: KitItem) -> bool:
        uploaded = self._editable("add_item")
        if uploaded is None:
            return _record("add_item", False)
        kit = uploaded.file
        if kit.find_item(item.id) is not None:
            logger.warning("Kit already has item %s", item.id, extra={"item_id": item.id})
            return _record("add_item", False)
        if not self._category_allowed(kit, item.category):
            logger.warning(
                "Unknown category %s for item %s", item.category, item.id, extra={"item_id": item.id}
            )
            return _record("add_item", False)
        edited = self._revalidated(kit, [*kit.items, item], item.id)
        if edited is None:
            return _record("add_item", False)
        self._replace_file(uploaded, edited)
        return _record("add_item", True)

    def update_item(self, item_id: str, **changes: Any) -> bool:
        uploaded = self._editable("update_item")
        if uploaded is None:
            return _record("update_item", False)
        kit = uploaded.file
        current = kit.find_item(item_id)
        if current is None:
            logger.warning("Kit has no item %s", item_id, extra={"item_id": item_id})
            return _record("update_item", False)
        unknown = set(changes) - _EDITABLE_ITEM_FIELDS
        if unknown:
            logger.warning(
                "Unknown kit item fields: %s", ", ".join(sorted(unknown)), extra={"item_id": item_id}
            )
            return _record("update_item", False)
        try:
            updated = KitItem.model_validate({**current.model_dump(), **changes})
        except ValidationError as exc:
            logger.warning("Rejected item update: %s", exc, extra={"item_id": item_id})
            return _record("update_item", False)
        if updated.id != item_id and kit.find_item(updated.id) is not None:
            logger.warning("Kit already has item %s", updated.id, extra={"item_id": updated.id})
            return _record("update_item", False)
        if not self._category_allowed(kit, updated.category):
            logger.warning("Unknown category %s", updated.category, extra={"item_id": item_id})
            return _record("update_item", False)
        items = [updated if item.id == item_id else item for item in kit.items]
        edited = self._revalidated(kit, items, item_id)
        if edited is None:
            return _record("update_item", False)
        self._replace_file(uploaded, edited)
        return _record("update_item", True)

    def remove_item(self, item_id: str) -> bool:
        uploaded = self._editable("remove_item")
        if uploaded is None:
            return _record("remove_item", False)
        kit = uploaded.file
        if kit.find_item(item_id) is None:
            logger.warning("Kit has no item %s", item_id, extra={"item_id": item_id})
            return _record("remove_item", False)
        if len(kit.items) == 1:
            logger.warning("Cannot remove the last item of a kit", extra={"item_id": item_id})
            return _record("remove_item", False)
        items = [item for item in kit.items if item.id != item_id]
        self._replace_file(uploaded, kit.model_copy(update={"items": items}))
        return _record("remove_item", True)

    # Export and persistence

    def export_kit(self) -> dict[str, Any]:
        """Wire representation of the active kit (the default kit when stale)."""

        return self.active_kit().to_wire()

    def to_state(self) -> dict[str, Any]:
        return {
            "uploaded_kits": [kit.to_state() for kit in self._uploaded],
            "selected_kit_id": self._selected,
        }

    @classmethod
    def from_state(
        cls,
        overrides: OverrideTracker,
        categories: CategoryCatalog,
        *,
        uploaded_kits: Iterable[Mapping[str, Any]] = (),
        selected_kit_id: str = DEFAULT_KIT_ID,
        builtin_kits: Mapping[str, KitFile] = BUILTIN_KITS,
    ) -> "KitRegistry":
        """Rebuild a registry from persisted state, re-validating every stored kit."""

        kits = []
        for entry in uploaded_kits:
            try:
                kits.append(
                    UploadedKit(
                        id=entry["id"],
                        file=load_kit_file(entry["file"]),
                        uploaded_at=entry["uploadedAt"],
                        forked_from=entry.get("forkedFrom"),
                    )
                )
            except (AttributeError, KeyError, TypeError, KitFileError, ValidationError) as exc:
                logger.warning("Dropping unreadable stored kit: %s", exc)
        return cls(
            overrides,
            categories,
            builtin_kits=builtin_kits,
            uploaded_kits=kits,
            selected_kit_id=selected_kit_id,
        )
