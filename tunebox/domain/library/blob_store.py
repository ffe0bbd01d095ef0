import os
import re
import time
import secrets
import logging
from pathlib import Path

from .errors import StorageError

logger = logging.getLogger(__name__)

_SAFE_EXT = re.compile(r'^\.[a-z0-9]{1,10}$')


class BlobStore:
    def __init__(self, base_dir, url_prefix='/uploads'):
        """Flat directory of uploaded audio blobs.

        :param base_dir: Directory holding the blobs; created if missing.
        :param url_prefix: Prefix of the references handed out by ``store``.
        """
        self.base_dir = Path(base_dir).absolute()
        self.url_prefix = '/' + url_prefix.strip('/')
        os.makedirs(self.base_dir, exist_ok=True)
        logger.info("BlobStore initialized with directory: %s", self.base_dir)

    def generate_name(self, suggested_name):
        """``<epoch ms>-<random>`` plus the suggested name's extension, lowercased."""
        ext = os.path.splitext(suggested_name or '')[1].lower()
        if not _SAFE_EXT.match(ext):
            ext = ''
        return f"{int(time.time() * 1000)}-{secrets.randbelow(10 ** 9)}{ext}"

    def reference_for(self, name):
        return f"{self.url_prefix}/{name}"

    def resolve(self, reference):
        # Only the final path component is honoured so references cannot leave base_dir
        name = os.path.basename((reference or '').replace('\\', '/'))
        if not name or name in ('.', '..'):
            raise StorageError(f"Invalid blob reference: {reference!r}")
        return self.base_dir / name

    def store(self, data, suggested_name):
        """Persist ``data`` under a fresh name and return its reference."""
        for _ in range(3):
            name = self.generate_name(suggested_name)
            target = self.base_dir / name
            try:
                # 'xb' refuses to overwrite a blob another writer created with the same name
                with open(target, 'xb') as fh:
                    fh.write(data)
            except FileExistsError:
                continue
            except OSError as e:
                logger.error("Failed to write blob %s: %s", target, e)
                raise StorageError(f"Could not store uploaded file: {e}") from e
            logger.info("Stored blob %s (%d bytes)", name, len(data))
            return self.reference_for(name)
        raise StorageError("Could not allocate a unique blob name")

    def exists(self, reference):
        try:
            return self.resolve(reference).is_file()
        except StorageError:
            return False

    def delete(self, reference):
        """Remove a blob. Returns False when it was already absent."""
        path = self.resolve(reference)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Could not delete {path.name}: {e}") from e
        logger.info("Deleted blob %s", path.name)
        return True

    def clear(self):
        """Delete every regular file in the blob directory; returns how many went."""
        removed = 0
        try:
            entries = list(self.base_dir.iterdir())
        except FileNotFoundError:
            return 0
        except OSError as e:
            raise StorageError(f"Could not list {self.base_dir}: {e}") from e
        for entry in entries:
            if not entry.is_file():
                continue
            try:
                entry.unlink()
                removed += 1
            except FileNotFoundError:
                pass
            except OSError as e:
                raise StorageError(f"Could not delete {entry.name}: {e}") from e
        logger.info("Cleared %d blob(s) from %s", removed, self.base_dir)
        return removed

    def is_writable(self):
        return self.base_dir.is_dir() and os.access(self.base_dir, os.W_OK)
