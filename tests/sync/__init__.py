"""
Test suite for file change detection.

This package contains tests for the synchronization components:
- WatchSession baselines, change detection and cancellation
- FileChangePoller scheduling and session replacement
- Filesystem and content-digest timestamp sources
"""
