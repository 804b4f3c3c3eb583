from __future__ import annotations

import logging
import os
import tempfile
from contextlib import contextmanager
from typing import Iterator, List, Sequence, Tuple

import numpy as np
import requests
from PIL import Image

from .errors import AcquisitionError

logger = logging.getLogger(__name__)

MIN_IMAGE_BYTES = 1000
USER_AGENT = "ionoreporter/3 (+ionogram scraper)"


def download(url: str, dest_dir: str, timeout: float) -> str:
    """Save ``url`` into ``dest_dir``; observatory hosts often run self-signed TLS."""
    r = requests.get(url, timeout=timeout, verify=False, headers={"User-Agent": USER_AGENT})
    r.raise_for_status()
    fd, path = tempfile.mkstemp(prefix="ionogram-", dir=dest_dir)
    with os.fdopen(fd, "wb") as f:
        f.write(r.content)
    return path


def decode(path: str) -> np.ndarray:
    size = os.path.getsize(path)
    if size <= MIN_IMAGE_BYTES:
        raise AcquisitionError(f"file is too small to be an ionogram ({size} bytes)")
    try:
        with Image.open(path) as im:
            rgb = im.convert("RGB")
    except Exception as exc:
        raise AcquisitionError(f"cannot decode image: {exc}") from exc
    return np.array(rgb)[:, :, ::-1].copy()  # BGR for cv2


def fetch_first(urls: Sequence[str], dest_dir: str, timeout: float) -> Tuple[str, np.ndarray]:
    """First URL that downloads and decodes wins."""
    errors: List[str] = []
    for url in urls:
        try:
            return url, decode(download(url, dest_dir, timeout))
        except (requests.RequestException, OSError, AcquisitionError) as exc:
            logger.info("[fetch] %s failed: %s", url, exc)
            errors.append(f"{url}: {exc}")
    if not errors:
        raise AcquisitionError("no image url configured")
    raise AcquisitionError("; ".join(errors))


@contextmanager
def acquired_ionogram(urls: Sequence[str], timeout: float) -> Iterator[Tuple[str, np.ndarray]]:
    """Download into a private temp dir that is removed when the block exits."""
    with tempfile.TemporaryDirectory(prefix="ionoreporter-") as td:
        yield fetch_first(urls, td, timeout)
