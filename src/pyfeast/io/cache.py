"""Persistence helpers for solver results."""
from __future__ import annotations

import json
from pathlib import Path
import shutil
from typing import Mapping

import numpy as np

from pyfeast.solver.result import FeastResult


class FeastResultCache:
    """Cache :class:`FeastResult` objects on disk, keyed by name and metadata."""

    spectra_filename = "result.npz"
    metadata_filename = "metadata.json"

    def __init__(self, base_path: Path) -> None:
        self.base_path = Path(base_path)

    def _resolve(self, name: str) -> Path:
        return self.base_path / name

    def available(self, name: str, *, metadata: Mapping[str, object]) -> bool:
        """True when ``name`` exists and was stored with identical ``metadata``."""
        path = self._resolve(name)
        spectra = path / self.spectra_filename
        meta_file = path / self.metadata_filename
        if not spectra.exists() or not meta_file.exists():
            return False
        try:
            with meta_file.open("r", encoding="utf-8") as handle:
                stored = json.load(handle)
        except json.JSONDecodeError:
            return False
        return stored == json.loads(json.dumps(dict(metadata), sort_keys=True))

    def load(self, name: str) -> FeastResult:
        path = self._resolve(name)
        with np.load(path / self.spectra_filename) as spectra:
            return FeastResult(
                eigenvalues=spectra["eigenvalues"],
                eigenvectors=spectra["eigenvectors"],
                M=int(spectra["M"]),
                residuals=spectra["residuals"],
                info=int(spectra["info"]),
                epsout=float(spectra["epsout"]),
                loops=int(spectra["loops"]),
            )

    def save(self, name: str, result: FeastResult, *, metadata: Mapping[str, object]) -> None:
        path = self._resolve(name)
        path.mkdir(parents=True, exist_ok=True)
        np.savez(
            path / self.spectra_filename,
            eigenvalues=result.eigenvalues,
            eigenvectors=result.eigenvectors,
            residuals=result.residuals,
            M=result.M,
            info=result.info,
            epsout=result.epsout,
            loops=result.loops,
        )
        with (path / self.metadata_filename).open("w", encoding="utf-8") as handle:
            json.dump(dict(metadata), handle, ensure_ascii=False,
                      indent=2, sort_keys=True)

    def drop(self, name: str) -> None:
        path = self._resolve(name)
        if path.exists():
            shutil.rmtree(path)
