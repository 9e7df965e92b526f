"""
Model Configuration

Settings shared by the command line script and the web dashboard.
"""

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Callable, Dict, Hashable, Optional, Union


@dataclass
class ModelConfig:
    """Options for loading a corpus, building a table and generating text."""
    order: int = 2
    lowercase: bool = False
    cross_documents: bool = True
    min_year: Optional[int] = None
    max_year: Optional[int] = None
    length: int = 50
    seed: Optional[int] = None
    encoding: str = 'utf-8'
    pattern: str = '*.txt'
    id_rule: str = 'stem'

    def __post_init__(self):
        for name in ('order', 'length', 'min_year', 'max_year', 'seed'):
            value = getattr(self, name)
            optional = name in ('min_year', 'max_year', 'seed')
            if value is None and optional:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        for name in ('lowercase', 'cross_documents'):
            if not isinstance(getattr(self, name), bool):
                raise ValueError(f"{name} must be true or false, got {getattr(self, name)!r}")
        for name in ('encoding', 'pattern', 'id_rule'):
            if not isinstance(getattr(self, name), str):
                raise ValueError(f"{name} must be a string, got {getattr(self, name)!r}")

        if self.order < 1:
            raise ValueError("order must be at least 1")
        if self.length < 0:
            raise ValueError("length must not be negative")
        if self.id_rule not in ('stem', 'year'):
            raise ValueError(f"Unknown id rule: {self.id_rule}")
        if (self.min_year is not None and self.max_year is not None
                and self.min_year > self.max_year):
            raise ValueError("min_year must not be greater than max_year")
        has_window = self.min_year is not None or self.max_year is not None
        if has_window and self.id_rule != 'year':
            raise ValueError("A year window needs the 'year' id rule")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ModelConfig':
        """Build a config from a dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'ModelConfig':
        """Load a config from a JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def replace(self, **overrides) -> 'ModelConfig':
        """Return a copy with the non-None overrides applied."""
        data = self.to_dict()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return ModelConfig.from_dict(data)

    def year_filter(self) -> Optional[Callable[[Hashable], bool]]:
        """Predicate keeping documents whose year id is inside the window."""
        if self.min_year is None and self.max_year is None:
            return None

        def keep(year) -> bool:
            if self.min_year is not None and year < self.min_year:
                return False
            if self.max_year is not None and year > self.max_year:
                return False
            return True

        return keep
