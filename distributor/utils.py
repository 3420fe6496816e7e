import json
from typing import Any


def yes_or_no(question: str) -> bool:
    """
    Require y or n (case insenstive) as answer to `question`.
    Defaults to N with no response
    """
    while "the answer is invalid":
        reply = input(f"{question} [y/N]: ")
        if not reply:
            return False
        reply = str(reply).lower().strip()
        if reply[:1] == "y":
            return True
        if reply[:1] == "n":
            return False
    return False


def write_json(data: Any, path: str) -> None:
    with open(path, "w+") as f:
        data_json = json.dumps(data, indent=4)
        f.write(data_json)


def to_hex(value: bytes) -> str:
    return "0x" + value.hex()
