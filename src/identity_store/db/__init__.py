"""identity_store.db — Схема хранилища по умолчанию."""
