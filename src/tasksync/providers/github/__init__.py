from tasksync.providers.github.adapter import GitHubAdapter

__all__ = ["GitHubAdapter"]
