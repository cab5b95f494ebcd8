import copy
import json
import logging
from collections import defaultdict
from os import PathLike
from typing import Any, Optional, Union

import toml


class ConfigFile:
    def __init__(
        self,
        config_file: Union[str, PathLike] = "config.toml",
        defaults: Optional[dict[str, Any]] = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.logger.debug(f"Initializing {__name__} for {config_file}")

        self.defaults = defaults if defaults is not None else {}
        self.config_file = str(config_file)
        self.data: dict[str, dict] = defaultdict(dict)

    def load(self):
        try:
            with open(self.config_file, "r") as config_file:
                if self.config_file.endswith(".toml"):
                    self.data = toml.load(config_file)
                else:
                    self.data = json.load(config_file)
                self.logger.debug("Existing config loaded.")
        except FileNotFoundError as e:
            self.logger.debug(f"Config file not found: {e}")
            raise
        except toml.TomlDecodeError as e:
            self.logger.error(f"Unable to decode existing config. Error: {e.msg}")
            raise
        except json.JSONDecodeError as e:
            self.logger.error(f"Unable to decode existing config. Error: {e.msg}")
            raise

    def create_defaults(self):
        self.data = copy.deepcopy(self.defaults)

    def load_or_create_defaults(self, allow_empty: bool = False):
        try:
            self.load()
            if not self.data and not allow_empty:
                self.logger.warning("Config file was empty, creating defaults")
                self.create_defaults()
        except FileNotFoundError as e:
            self.logger.info(f"No config file, using defaults. ({e.filename})")
            self.create_defaults()
        except (toml.TomlDecodeError, json.JSONDecodeError) as e:
            self.create_defaults()
            self.logger.warning(
                f"Unable to decode existing config, using defaults. Error: {e.msg}"
            )
