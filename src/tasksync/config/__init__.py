"""Config loading."""

from tasksync.config.loader import find_project_config, home_config_path, load_home_config, load_project_config

__all__ = ["find_project_config", "home_config_path", "load_home_config", "load_project_config"]
