"""
AutoScout24 crawl API: streams crawl events over HTTP.
"""
