#########################################
# Description: This file handles all database operations.
#
# One sqlite file holds a one-row meta table (salt + bcrypt hash of the
# passphrase) and the passwords table. Every text field of a password row
# is stored as a Fernet token derived from the passphrase.
#########################################

import base64, bcrypt, hashlib, logging, os, sqlite3
from contextlib import contextmanager
from pathlib import Path
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from app.errors import AuthenticationError, StoreIOError
from record import Record

KDF_ITERATIONS = 100000
BCRYPT_ROUNDS = 12
SALT_BYTES = 16


def derive_cipher(passphrase: str, salt: bytes) -> Fernet:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=KDF_ITERATIONS,
    )
    encryption_key = base64.urlsafe_b64encode(kdf.derive(passphrase.encode('utf-8')))
    return Fernet(encryption_key)


def _bcrypt_input(passphrase: str) -> bytes:
    # bcrypt only looks at 72 bytes, so hash long passphrases down first
    return base64.b64encode(hashlib.sha256(passphrase.encode('utf-8')).digest())


class RecordStore:
    def __init__(self, conn: sqlite3.Connection, cipher: Fernet, path: Path):
        self.conn = conn
        self.cipher = cipher
        self.path = path

    @classmethod
    def open(cls, passphrase: str, path) -> "RecordStore":
        """Open (or create) the store at ``path`` and unlock it with ``passphrase``.

        Raises AuthenticationError when the passphrase does not match the one
        the store was created with, StoreIOError for anything else.
        """
        if not passphrase:
            raise AuthenticationError("passphrase must not be empty")
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(path)
        except (OSError, sqlite3.Error) as e:
            logging.error(f"Could not open store at {path}: {e}")
            raise StoreIOError(f"could not open {path}: {e}") from e

        try:
            salt = cls._unlock(conn, passphrase)
        except BaseException:
            conn.close()
            raise

        logging.info(f"Opened store at {path}")
        return cls(conn, derive_cipher(passphrase, salt), path)

    @staticmethod
    def _unlock(conn: sqlite3.Connection, passphrase: str) -> bytes:
        try:
            conn.execute('''
                CREATE TABLE IF NOT EXISTS meta (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    salt BLOB NOT NULL,
                    passphrase_hash TEXT NOT NULL
                )
            ''')
            conn.execute('''
                CREATE TABLE IF NOT EXISTS passwords (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    username TEXT NOT NULL,
                    password TEXT NOT NULL
                )
            ''')
            row = conn.execute("SELECT salt, passphrase_hash FROM meta WHERE id = 1").fetchone()

            if row is None:
                # First use: this passphrase becomes the store's passphrase
                salt = os.urandom(SALT_BYTES)
                hashed = bcrypt.hashpw(_bcrypt_input(passphrase), bcrypt.gensalt(BCRYPT_ROUNDS)).decode('utf-8')
                conn.execute(
                    "INSERT INTO meta (id, salt, passphrase_hash) VALUES (1, ?, ?)",
                    (salt, hashed)
                )
                conn.commit()
                logging.info("Initialized new store")
                return salt
        except sqlite3.Error as e:
            logging.error(f"Database initialization error: {e}")
            raise StoreIOError(f"could not initialize store: {e}") from e

        salt, stored_hash = row
        if not bcrypt.checkpw(_bcrypt_input(passphrase), stored_hash.encode('utf-8')):
            logging.warning("Passphrase rejected")
            raise AuthenticationError("passphrase is not valid!")
        return salt

    @contextmanager
    def _cursor(self, action: str):
        cursor = self.conn.cursor()
        try:
            yield cursor
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            logging.error(f"Database error in {action}: {e}")
            raise StoreIOError(f"{action} failed: {e}") from e
        finally:
            cursor.close()

    def _encrypt(self, value: str) -> str:
        return self.cipher.encrypt(value.encode('utf-8')).decode('utf-8')

    def _decrypt(self, token: str) -> str:
        return self.cipher.decrypt(token.encode('utf-8')).decode('utf-8')

    def load_all(self) -> list[Record]:
        with self._cursor("load_all") as cursor:
            cursor.execute("SELECT id, title, username, password FROM passwords ORDER BY id")
            rows = cursor.fetchall()

        records = []
        for row in rows:
            try:
                records.append(Record(
                    id=row[0],
                    title=self._decrypt(row[1]),
                    username=self._decrypt(row[2]),
                    password=self._decrypt(row[3])
                ))
            except InvalidToken as e:
                logging.error(f"Decryption failed for record ID {row[0]}")
                raise StoreIOError(f"record {row[0]} could not be decrypted") from e
        logging.info(f"Loaded {len(records)} records")
        return records

    def insert(self, record: Record) -> int:
        if record.is_persisted:
            raise ValueError(f"record already has id {record.id}")
        with self._cursor("insert") as cursor:
            cursor.execute(
                "INSERT INTO passwords (title, username, password) VALUES (?, ?, ?)",
                (self._encrypt(record.title), self._encrypt(record.username), self._encrypt(record.password))
            )
            new_id = cursor.lastrowid
        logging.info(f"Inserted record with ID {new_id}")
        return new_id

    def update(self, record_id: int, record: Record) -> None:
        with self._cursor("update") as cursor:
            cursor.execute(
                "UPDATE passwords SET title = ?, username = ?, password = ? WHERE id = ?",
                (self._encrypt(record.title), self._encrypt(record.username), self._encrypt(record.password), record_id)
            )
            matched = cursor.rowcount
        if matched == 0:
            logging.error(f"Update matched no record with ID {record_id}")
            raise StoreIOError(f"record {record_id} no longer exists")
        logging.info(f"Updated record with ID {record_id}")

    def delete(self, record_id: int) -> None:
        with self._cursor("delete") as cursor:
            cursor.execute("DELETE FROM passwords WHERE id = ?", (record_id,))
        logging.info(f"Deleted record with ID {record_id}")

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None
            logging.info(f"Closed store at {self.path}")

    def __enter__(self) -> "RecordStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
