# data_export.py
# Single-document JSON export of faces, feedback and learning statistics.

import logging
from datetime import datetime, timezone

from descriptor_store import DescriptorStore
from feedback_ledger import FeedbackLedger
from persistence import save_json

logger = logging.getLogger(__name__)


def build_export(store: DescriptorStore, ledger: FeedbackLedger) -> dict:
    return {
        "feedbackDatabase": [f.to_dict() for f in ledger.entries()],
        "learningStats": ledger.stats.to_dict(),
        "faceDatabase": store.to_list(),
        "exportDate": datetime.now(timezone.utc).isoformat(),
    }


def default_export_filename() -> str:
    return f"face-detection-data-{datetime.now().strftime('%Y-%m-%d')}.json"


def export_to_file(store: DescriptorStore, ledger: FeedbackLedger, path: str) -> bool:
    ok = save_json(path, build_export(store, ledger))
    if ok:
        logger.info(f"Exported {len(store)} faces and {len(ledger)} feedback entries to {path}")
    return ok
