"""여행 문서 로컬 저장/복원."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from eurotrip.core.config import get_settings
from eurotrip.core.logger import get_logger
from eurotrip.core.scheduling import Debouncer
from eurotrip.schemas.trip import TripDocument
from eurotrip.store.reducer import create_default_document
from eurotrip.store.store import TripStore

logger = get_logger(__name__)

_PERSISTED_SEGMENT_FIELDS = {"from_stop_id", "to_stop_id", "distance_km", "duration_hours"}


class TripStorage(Protocol):
    """고정 키 하나에 직렬화된 문서를 보관하는 저장소."""

    def read(self) -> str | None: ...

    def write(self, text: str) -> None: ...

    def clear(self) -> None: ...


class FileTripStorage:
    """`<directory>/<key>.json` 파일 저장소."""

    def __init__(self, directory: str | Path, key: str) -> None:
        self.path = Path(directory) / f"{key}.json"

    @classmethod
    def from_settings(cls) -> FileTripStorage:
        settings = get_settings()
        return cls(settings.TRIP_STORAGE_DIR, settings.TRIP_STORAGE_KEY)

    def read(self) -> str | None:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.write_text(text, encoding="utf-8")
        tmp_path.replace(self.path)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class MemoryTripStorage:
    """프로세스 메모리 저장소."""

    def __init__(self, text: str | None = None) -> None:
        self.text = text
        self.writes = 0

    def read(self) -> str | None:
        return self.text

    def write(self, text: str) -> None:
        self.text = text
        self.writes += 1

    def clear(self) -> None:
        self.text = None


def serialize_document(document: TripDocument) -> str:
    """경로 구간 geometry를 제외하고 문서를 JSON으로 직렬화합니다."""
    payload = document.model_dump(mode="json", exclude={"route_segments"})
    payload["route_segments"] = [
        segment.model_dump(mode="json", include=_PERSISTED_SEGMENT_FIELDS) for segment in document.route_segments
    ]
    return json.dumps(payload, ensure_ascii=False)


def deserialize_document(text: str | None) -> TripDocument | None:
    """저장된 JSON을 문서로 복원합니다.

    `metadata`와 리스트 형태의 `stops`가 없거나 검증에 실패하면 None을
    반환합니다. 경로 구간은 다시 조회되므로 항상 비워서 복원합니다.
    """
    if not text:
        return None
    try:
        raw = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Stored trip document is not valid JSON; discarding")
        return None

    if not isinstance(raw, dict) or not isinstance(raw.get("metadata"), dict) or not isinstance(raw.get("stops"), list):
        logger.warning("Stored trip document has unexpected shape; discarding")
        return None

    raw["route_segments"] = []
    try:
        return TripDocument.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Stored trip document failed validation: %s", exc.error_count())
        return None


def load_trip_document(storage: TripStorage) -> TripDocument:
    """저장소에서 문서를 읽고, 없거나 손상되었으면 기본 문서를 반환합니다."""
    try:
        text = storage.read()
    except OSError as exc:
        logger.warning("Failed to read stored trip document: %s", exc)
        return create_default_document()
    return deserialize_document(text) or create_default_document()


class TripPersister:
    """저장소 변경을 디바운스해 저장합니다.

    실행 중인 이벤트 루프가 없으면 변경 즉시 저장합니다.
    """

    def __init__(self, store: TripStore, storage: TripStorage, debounce_seconds: float | None = None) -> None:
        if debounce_seconds is None:
            debounce_seconds = get_settings().TRIP_PERSIST_DEBOUNCE_SECONDS
        self._store = store
        self._storage = storage
        self._debouncer = Debouncer(debounce_seconds)
        self._unsubscribe = None

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._store.subscribe(self._on_change)

    def close(self) -> None:
        """구독을 해제하고 대기 중인 저장을 즉시 수행합니다."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._debouncer.pending:
            self.flush()

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def flush(self) -> None:
        self._debouncer.cancel()
        try:
            self._storage.write(serialize_document(self._store.document))
        except OSError as exc:
            logger.warning("Trip document not persisted: %s", exc)

    def _on_change(self, previous: TripDocument, current: TripDocument) -> None:
        try:
            self._debouncer.call(self.flush)
        except RuntimeError:
            self.flush()
