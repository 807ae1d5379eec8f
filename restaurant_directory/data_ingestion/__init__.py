"""
Dataset enrichment package.

Responsibilities:
- Read the Zomato restaurant CSV export.
- Map and enrich rows into restaurant documents (amenities, images, reviews).
- Write the enriched dataset as JSON and load it into the store.
"""
