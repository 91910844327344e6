#!/usr/bin/env python
# -*- coding: utf-8 -*-

import json
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Tuple

from .exceptions import MissingConfigFile, MissingConfigEntry


def get_config_path() -> Path:
    if Path('kvmigrate', 'config').exists():
        # Running from the repository
        return Path('kvmigrate', 'config')
    return Path(sys.modules['kvmigrate'].__file__).parent / 'config'


@lru_cache(64)
def load_general_config() -> Tuple[Dict[str, Any], Path]:
    general_config_file = get_config_path() / 'generic.json'
    if not general_config_file.exists():
        raise MissingConfigFile(f'The general configuration file ({general_config_file}) does not exists.')
    with general_config_file.open() as f:
        config = json.load(f)
    return config, general_config_file


def get_config(entry: str) -> Any:
    config, general_config_file = load_general_config()
    if entry not in config:
        raise MissingConfigEntry(f'"{entry}" is missing in {general_config_file}.')
    return config[entry]


def print_marker(marker: str):
    print(marker, end='', flush=True)
