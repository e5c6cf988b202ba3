"""Browser session, page capabilities and multi-URL crawling."""
