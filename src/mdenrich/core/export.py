"""Export: write enriched documents and their sidecar metadata JSON"""

import json
from pathlib import Path

from mdenrich.core.pipeline import PipelineResult
from mdenrich.core.utils.hashing import sha256


def build_sidecar(result: PipelineResult, source: str) -> dict:
    """Sidecar dict: source path, content hash, merged metadata, and per-plugin reports."""
    return {
        "source": source,
        "hash": sha256(result.content),
        "metadata": result.metadata.model_dump(mode='json'),
        "repair": result.repair.model_dump(mode='json', exclude={'repaired_content'}) if result.repair else None,
        "reports": [
            {"plugin": name, **report.model_dump(mode='json')}
            for name, report in result.reports
        ],
        "failures": list(result.failures),
    }


def write_document(result: PipelineResult, relative_path: Path, output_dir: Path) -> tuple[Path, Path]:
    """Write the enriched document and its sidecar JSON.

    Output mirrors the source layout:
      output_dir / relative_path            (document)
      output_dir / relative_path.json       (sidecar, e.g. guide.md.json)

    Returns (doc_path, json_path).
    """
    doc_path = output_dir / relative_path
    doc_path.parent.mkdir(parents=True, exist_ok=True)
    json_path = doc_path.with_name(f"{doc_path.name}.json")

    doc_path.write_text(result.content, encoding='utf-8')
    json_path.write_text(
        json.dumps(build_sidecar(result, str(relative_path)), indent=2, ensure_ascii=False),
        encoding='utf-8',
    )
    return doc_path, json_path
