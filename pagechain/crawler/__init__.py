"""Reference crawl engine: downloader, link extraction and worker pool."""
