"""
identity_store — Отображение identity-сущностей на обобщённую реляционную схему.

Два основных компонента:
    • RecordMapper — доменный объект ⇄ запись хранилища (общие поля)
    • PredicateCompiler — абстрактные параметры запроса → SQLAlchemy-предикаты
"""

__version__ = "0.1.0"
