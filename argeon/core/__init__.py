"""
Core installation engine.

This package contains the primary logic. The `InstallationOrchestrator` acts
as the high-level coordinator, resolving paths, delegating launcher
configuration to an adapter and the fetching of each file to the
`DownloadEngine`.
"""
