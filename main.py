import sys
from dataclasses import dataclass
from pathlib import Path

from rich.pretty import pprint

from serialine import *

__prog__ = "copy"


@dataclass
class Copy:
    sources: list[Path] = argument("SOURCE")
    force: bool = option("-f", "--force")
    verbose: bool = option("-v", "--verbose")
    jobs: int = option("-j", "--jobs", default=1)
    exclude: list[str] = option("-x", "--exclude", default_factory=list)


if __name__ == '__main__':
    instance, remaining = Serializer(shell=True, fancy=True).deserialize_object(Copy, sys.argv[1:])
    pprint(instance)
    pprint(remaining)
