"""Chat model configuration — supports OpenAI and Gemini."""

from allertify.config import get_settings

settings = get_settings()


def get_llm():
    """Get the configured chat model, tuned for repeatable verdicts."""
    if settings.AI_PROVIDER == "openai":
        from langchain_openai import ChatOpenAI
        return ChatOpenAI(
            api_key=settings.OPENAI_API_KEY,
            model="gpt-4o-mini",
            temperature=0.1,
            timeout=settings.AI_TIMEOUT_SECONDS,
        )
    else:
        from langchain_google_genai import ChatGoogleGenerativeAI
        return ChatGoogleGenerativeAI(
            google_api_key=settings.GEMINI_API_KEY,
            model="gemini-2.5-flash",
            temperature=0.1,
            timeout=settings.AI_TIMEOUT_SECONDS,
        )
