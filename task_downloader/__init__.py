"""
Task Downloader – a tiny HTTP service that downloads remote files into tasks.

Create a task, attach up to three PDF/JPEG urls to it, and the server fetches
them into a temporary directory. Stopping the server waits for active
downloads, then removes the directory.
"""

__version__ = "0.1.0"
