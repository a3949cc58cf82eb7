"""
Ingestion — crawling, normalisation, chunking, and embedding into the vector store.

This module turns seed URLs for one state into embedded chunks: pages are
fetched under robots.txt, normalised to Markdown or plain text, split into
overlapping chunks, embedded, and stored one chunk at a time.
"""
