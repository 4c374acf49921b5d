"""
SEO Article Pipeline

Generates SEO-formatted blog articles with a chat-completion API:
- Discovers trending topics through search and news APIs
- Plans an outline and writes the article body
- Cleans generated markdown and produces SEO metadata and a score
- Translates articles into several locales
- Stores the result in MongoDB
"""

__version__ = "0.1.0"
