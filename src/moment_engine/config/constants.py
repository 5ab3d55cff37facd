"""Closed word lists and fixed constants shared across modules."""

from __future__ import annotations

MIN_TOKEN_LENGTH = 3
MAX_TOKEN_LENGTH = 24

STOPWORDS = frozenset(
    {
        # English function words
        "the", "and", "for", "with", "from", "that", "this", "these", "those",
        "into", "over", "under", "about", "your", "you", "our", "are", "was",
        "were", "will", "have", "has", "had", "not", "but", "all", "any", "can",
        "how", "why", "what", "when", "where", "who", "whom", "which", "now",
        "just", "than", "then", "more", "most", "less", "very", "use", "using",
        "used", "make", "made", "get", "gets", "got", "been", "being", "its",
        "their", "they", "them", "there", "here", "his", "her", "hers", "she",
        "him", "out", "off", "again", "also", "only", "own", "same", "some",
        "such", "too", "each", "few", "other", "both", "does", "did", "doing",
        "would", "could", "should", "shall", "might", "must", "may", "yet",
        "per", "upon", "onto", "after", "before", "while", "because", "until",
        "between", "through", "during", "without", "within", "against", "ever",
        "one", "two", "way", "like", "ask", "tell",
        # Source and meta noise
        "via", "new", "show", "top", "part", "launch", "hn", "reddit",
        "fusion", "confirmed", "single", "source", "reinforced", "conf",
        "high", "med", "low", "www", "com", "org", "net", "html",
    }
)

JARGON = frozenset(
    {
        "llm", "rag", "embedding", "embeddings", "vector", "vectors", "token",
        "tokens", "inference", "fine-tune", "finetune", "finetuning", "latency",
        "throughput", "gpu", "cuda", "transformer", "diffusion", "benchmark",
        "benchmarks", "api", "sdk", "devops", "kubernetes", "microservices",
        "serverless", "observability", "telemetry", "cryptography", "blockchain",
        "web3", "defi", "nft", "tokenomics",
    }
)

GENERIC_MOMENT_NAMES = (
    "emerging moment",
    "emerging tech signal",
    "ai capability",
    "ai tooling",
    "security pressure",
    "dev workflow shift",
    "developer workflow evolution",
    "web/platform behaviour",
    "web platform changes surfacing",
    "data + performance",
    "data and performance focus",
    "builder/operator behaviour",
    "startup/operator chatter",
    "tech moment",
    "moment",
    "trend",
)

CATEGORY_LABELS = {
    "ai": "AI",
    "security": "Security",
    "devtools": "Devtools",
    "web": "Web",
    "data": "Data",
    "mobile": "Mobile",
    "startup": "Startup",
}

DEFAULT_CATEGORY = "technology"

SOURCE_ALIASES = {
    "hackernews": "hn",
    "hacker-news": "hn",
    "r": "reddit",
    "subreddit": "reddit",
}
