from tasksync.providers.jira.adapter import JiraAdapter

__all__ = ["JiraAdapter"]
