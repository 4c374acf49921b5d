"""
Editorial categories for article generation.

Each category carries a display name, the keyword pool used for offline
topic suggestions and the search queries used to look for trends.
"""

import random
from typing import Any

TOPICS: dict[str, dict[str, Any]] = {
    "webDevelopment": {
        "name": "Web Development",
        "emoji": "🌐",
        "keywords": [
            "frontend", "backend", "full-stack", "javascript", "typescript",
            "react", "vue", "angular", "next.js", "nuxt", "svelte",
            "node.js", "express", "nestjs", "rest api", "graphql",
            "html5", "css3", "tailwind", "sass", "responsive design",
            "web performance", "progressive web app", "jamstack",
            "server-side rendering", "static site generation", "edge computing",
        ],
        "search_queries": [
            "web development trends 2026",
            "frontend framework comparison",
            "backend technologies news",
            "javascript ecosystem updates",
        ],
    },
    "mobileDevelopment": {
        "name": "Mobile Development",
        "emoji": "📱",
        "keywords": [
            "ios", "android", "swift", "kotlin", "react native", "flutter",
            "cross-platform", "mobile app", "app store optimization",
            "mobile ui/ux", "push notifications", "offline-first",
            "mobile security", "app performance", "wearables", "mobile iot",
        ],
        "search_queries": [
            "mobile development trends 2026",
            "flutter vs react native",
            "ios android development news",
            "mobile app best practices",
        ],
    },
    "artificialIntelligence": {
        "name": "Artificial Intelligence",
        "emoji": "🤖",
        "keywords": [
            "machine learning", "deep learning", "nlp", "computer vision",
            "generative ai", "llm", "transformers", "prompt engineering",
            "fine-tuning", "rag", "embeddings", "tensorflow", "pytorch",
            "hugging face", "ai automation", "ai agents", "multimodal ai",
        ],
        "search_queries": [
            "artificial intelligence news 2026",
            "generative ai developments",
            "llm updates and releases",
            "ai in software development",
        ],
    },
    "blockchain": {
        "name": "Blockchain & Web3",
        "emoji": "⛓️",
        "keywords": [
            "blockchain", "ethereum", "solidity", "smart contracts", "defi",
            "nft", "web3", "dao", "tokenomics", "layer 2", "polygon",
            "bitcoin", "wallet", "dapp", "ipfs", "decentralization",
            "consensus", "proof of stake", "zk-rollups", "cross-chain",
        ],
        "search_queries": [
            "blockchain technology news 2026",
            "web3 development updates",
            "ethereum ecosystem news",
            "defi and crypto trends",
        ],
    },
    "softwareArchitecture": {
        "name": "Software Architecture",
        "emoji": "🏗️",
        "keywords": [
            "microservices", "monolith", "hexagonal architecture", "ddd",
            "design patterns", "solid", "clean architecture", "cqrs",
            "event sourcing", "api design", "scalability", "high availability",
            "load balancing", "caching", "message queue", "kafka", "rabbitmq",
            "service mesh", "kubernetes", "containerization", "docker",
        ],
        "search_queries": [
            "software architecture patterns 2026",
            "microservices best practices",
            "system design trends",
            "scalable architecture news",
        ],
    },
    "databases": {
        "name": "Databases",
        "emoji": "🗄️",
        "keywords": [
            "sql", "nosql", "postgresql", "mongodb", "mysql", "redis",
            "elasticsearch", "graph database", "time series", "vector database",
            "orm", "query optimization", "indexing", "sharding", "replication",
            "acid", "cap theorem", "data modeling", "schema migration", "backup",
        ],
        "search_queries": [
            "database technology trends 2026",
            "sql vs nosql comparison",
            "vector database news",
            "database performance optimization",
        ],
    },
    "dataAnalytics": {
        "name": "Data Analytics",
        "emoji": "📊",
        "keywords": [
            "data science", "business intelligence", "data visualization",
            "power bi", "pandas", "numpy", "data pipeline", "etl",
            "data warehouse", "data lake", "big data", "spark", "analytics",
            "kpi", "reporting", "predictive analytics", "data governance",
            "data quality",
        ],
        "search_queries": [
            "data analytics trends 2026",
            "business intelligence news",
            "data science tools updates",
            "big data technology news",
        ],
    },
    "cloudDevOps": {
        "name": "Cloud & DevOps",
        "emoji": "☁️",
        "keywords": [
            "aws", "azure", "google cloud", "cloud native", "serverless",
            "ci/cd", "github actions", "gitlab ci", "jenkins", "terraform",
            "infrastructure as code", "monitoring", "observability", "logging",
            "kubernetes", "helm", "gitops", "sre", "incident management",
        ],
        "search_queries": [
            "cloud computing trends 2026",
            "devops best practices",
            "kubernetes news updates",
            "serverless architecture news",
        ],
    },
    "cybersecurity": {
        "name": "Cybersecurity",
        "emoji": "🔒",
        "keywords": [
            "web security", "owasp", "penetration testing", "vulnerability",
            "encryption", "authentication", "oauth", "jwt", "zero trust",
            "soc", "siem", "threat detection", "ransomware", "phishing",
            "compliance", "gdpr", "security audit", "devsecops",
        ],
        "search_queries": [
            "cybersecurity threats 2026",
            "web security best practices",
            "data protection news",
            "security vulnerabilities updates",
        ],
    },
    "uxDesign": {
        "name": "UX/UI Design",
        "emoji": "🎨",
        "keywords": [
            "user experience", "user interface", "design system", "figma",
            "prototyping", "wireframing", "usability testing", "accessibility",
            "wcag", "design thinking", "user research", "interaction design",
            "motion design", "responsive design", "design tokens", "atomic design",
        ],
        "search_queries": [
            "ux design trends 2026",
            "ui design best practices",
            "accessibility standards news",
            "design tools updates",
        ],
    },
}


def get_category(category_id: str) -> dict[str, Any] | None:
    """Return a category with its id, or None when unknown."""
    category = TOPICS.get(category_id)
    if category is None:
        return None
    return {"id": category_id, **category}


def get_all_categories() -> list[dict[str, Any]]:
    """Return every category with its id attached."""
    return [{"id": key, **value} for key, value in TOPICS.items()]


def get_random_category(rng: random.Random | None = None) -> dict[str, Any]:
    """Pick a category at random."""
    rng = rng or random
    key = rng.choice(list(TOPICS))
    return {"id": key, **TOPICS[key]}


def get_category_label(category: str | None) -> str:
    """Display name for a category id, or the raw value for free-form labels."""
    if not category:
        return "Tech"
    found = TOPICS.get(category)
    return found["name"] if found else category


def get_trend_search_queries() -> list[str]:
    """Flatten the trend search queries of every category."""
    return [query for topic in TOPICS.values() for query in topic["search_queries"]]
