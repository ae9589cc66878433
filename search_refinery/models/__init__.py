"""Data models for results, options and component contracts."""
