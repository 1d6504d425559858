"""Adapters for the services the pipeline talks to.

- linkding: bookmark REST API (source of truth)
- llm: chat completions used for tagging and summaries
- search: web search used to resolve saved searches
- content: readable-text extraction
"""
