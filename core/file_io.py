"""
File reading and writing for persisted country records.

Each successfully parsed country is written as one pretty-printed JSON record
named `<CODE>.json` inside the output directory. Reading a record back is used
by validation runs to diff it against freshly parsed data.
"""

import json
import os
from pathlib import Path
from typing import Any, Protocol

from core.exceptions import FileReadError, FileWriteError, InvalidFilePathError
from core.models import CountryData


class FileReader(Protocol):
    """
    Protocol defining the interface for file reading operations.

    Allows swapping the filesystem for an in-memory reader in tests.
    """

    def read_file(self, file_path: Path) -> str:
        """
        Read the text content of a file as UTF-8.

        Args:
            file_path: The path to the file to read.

        Returns:
            The file content.
        """


class FileWriter(Protocol):
    """
    Protocol defining the interface for file writing operations.

    Allows swapping the filesystem for an in-memory writer in tests.
    """

    def write_file(self, data: str, mode: str = "w") -> None:
        """
        Write data to a file.

        Args:
            data: String data to write.
            mode: File mode ("w" for write/truncate, "a" for append). Defaults to "w".
        """

    def write_json(self, data: dict[str, Any]) -> None:
        """
        Replace the file's content with the JSON serialization of `data`.

        Args:
            data: JSON-compatible dictionary.
        """


class FilesystemFileReader:
    def read_file(self, file_path: Path) -> str:
        """
        Read the text content of a file as UTF-8.

        Raises:
            FileReadError: If the file is missing or an I/O error occurs.
        """
        try:
            with file_path.open("r", encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise FileReadError(
                message=f"Failed to read file: {file_path}",
                file_path=str(file_path),
                original_exception=e,
            ) from e


class FilesystemFileWriter:
    def __init__(self, file_path: Path | None = None):
        self.file_path = file_path

    @classmethod
    def from_path(cls, file_path: Path) -> "FilesystemFileWriter":
        """
        Create a writer instance with an explicit file path.

        Args:
            file_path: The path to the file to manage.

        Returns:
            FilesystemFileWriter instance configured for the given path.

        Raises:
            InvalidFilePathError: If file_path is invalid (e.g., parent directory
                doesn't exist or is not writable).
        """
        parent = file_path.parent
        if not parent.exists():
            raise InvalidFilePathError(
                message=f"Parent directory does not exist: {parent}",
                file_path=str(file_path),
            )
        if not os.access(parent, os.W_OK):
            raise InvalidFilePathError(
                message=f"Parent directory is not writable: {parent}",
                file_path=str(file_path),
            )

        return cls(file_path)

    def write_file(self, data: str, mode: str = "w") -> None:
        """
        Writes data to the output file.

        Raises:
            InvalidFilePathError: If file path is not set.
            FileWriteError: If writing to the file fails.
        """
        if self.file_path is None:
            raise InvalidFilePathError("No file path set. Use a factory method first.")

        try:
            with open(self.file_path, mode, encoding="utf-8") as f:
                f.write(data)
        except OSError as e:
            raise FileWriteError(
                message=f"Failed to write to file: {self.file_path}",
                file_path=str(self.file_path),
                original_exception=e,
            ) from e

    def write_json(self, data: dict[str, Any]) -> None:
        self.write_file(json.dumps(data, indent=2, ensure_ascii=False) + "\n")


class MockFileWriter:
    """
    Mock implementation of FileWriter for testing.

    Attributes (for test inspection):
        write_file_calls: List of tuples (data, mode) passed to write_file()
        written_json: Dictionaries passed to write_json(), in call order.
    """

    def __init__(self) -> None:
        self.write_file_calls: list[tuple[str, str]] = []
        self.written_json: list[dict[str, Any]] = []

    def write_file(self, data: str, mode: str = "w") -> None:
        self.write_file_calls.append((data, mode))

    def write_json(self, data: dict[str, Any]) -> None:
        self.written_json.append(data)


def country_record_path(output_dir: Path, country_code: str) -> Path:
    return output_dir / f"{country_code.upper()}.json"


def save_country_data(
    data: CountryData, output_dir: Path, writer: FileWriter | None = None
) -> Path:
    """
    Persist a country record as `<CODE>.json` in `output_dir`.

    The output directory is created when missing.

    Args:
        data: The parsed country record. Its country code names the file.
        output_dir: Directory receiving the record.
        writer: Optional writer; defaults to a filesystem writer for the
            record path.

    Returns:
        The path of the written record.

    Raises:
        InvalidFilePathError: If the record has no country code or the
            directory cannot be used.
        FileWriteError: If writing fails.
    """
    if not data.country_code:
        raise InvalidFilePathError(
            message=f"Cannot name a record without a country code ({data.name})"
        )

    path = country_record_path(output_dir, data.country_code)
    if writer is None:
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InvalidFilePathError(
                message=f"Cannot create output directory: {output_dir}",
                file_path=str(output_dir),
                original_exception=e,
            ) from e
        writer = FilesystemFileWriter.from_path(path)

    writer.write_json(data.to_dict())
    return path


def load_country_data(path: Path, reader: FileReader | None = None) -> CountryData:
    """
    Load a country record previously written by `save_country_data`.

    Raises:
        FileReadError: If the file cannot be read or is not a valid record.
    """
    reader = reader or FilesystemFileReader()
    text = reader.read_file(path)
    try:
        return CountryData.from_dict(json.loads(text))
    except (ValueError, KeyError, TypeError) as e:
        raise FileReadError(
            message=f"Invalid country record: {path}",
            file_path=str(path),
            original_exception=e,
        ) from e
