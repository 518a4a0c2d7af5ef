"""
Image sourcing and validation for vocabulary flashcards.

This package orchestrates:
1. In-process caching of resolved word images
2. Illustration generation
3. Photo search across Unsplash, Pixabay and Pexels
4. Semantic ranking and validation with a vision model
5. Curated fallback images
"""
