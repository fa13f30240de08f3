from app.data.seed_questions import SEED_QUESTIONS

__all__ = ["SEED_QUESTIONS"]
