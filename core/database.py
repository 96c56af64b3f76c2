"""
Модели SQLAlchemy и репозиторий метаданных сертификатов (документное хранилище).
"""

import logging
from datetime import datetime
from typing import List, Optional, Set
from sqlalchemy import create_engine, Column, String, Text, Index, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from config.settings import get_settings
from .exceptions import StorageError
from .models import Certificate

logger = logging.getLogger(__name__)

# Базовый класс для моделей
Base = declarative_base()


class CertificateRecord(Base):
    """Модель записи метаданных сертификата."""

    __tablename__ = "certificates"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    issuer = Column(String(255), nullable=False)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    category = Column(String(20), nullable=False, index=True)
    notes = Column(Text, nullable=False, default="")
    file_name = Column(String(255), nullable=False)
    blob_name = Column(String(300), nullable=False, unique=True)
    file_url = Column(Text, nullable=False)
    uploaded_at = Column(String(40), nullable=False)  # ISO-8601 с часовым поясом

    __table_args__ = (
        Index('idx_certificate_uploaded_at', 'uploaded_at'),
    )

    def __repr__(self):
        return f"<CertificateRecord(id={self.id}, name={self.name})>"

    @classmethod
    def from_certificate(cls, certificate: Certificate) -> "CertificateRecord":
        """Создает запись БД из Pydantic модели."""
        return cls(
            id=certificate.id,
            name=certificate.name,
            issuer=certificate.issuer,
            date=certificate.date,
            category=certificate.category.value,
            notes=certificate.notes,
            file_name=certificate.file_name,
            blob_name=certificate.blob_name,
            file_url=certificate.file_url,
            uploaded_at=certificate.uploaded_at.isoformat()
        )

    def to_certificate(self) -> Certificate:
        """Конвертирует запись БД в Pydantic модель."""
        return Certificate(
            id=self.id,
            name=self.name,
            issuer=self.issuer,
            date=self.date,
            category=self.category,
            notes=self.notes or "",
            file_name=self.file_name,
            blob_name=self.blob_name,
            file_url=self.file_url,
            uploaded_at=datetime.fromisoformat(self.uploaded_at)
        )


class DatabaseManager:
    """Менеджер для работы с базой данных."""

    def __init__(self, database_url: str = None):
        """
        Инициализация менеджера БД.

        Args:
            database_url: URL подключения к БД
        """
        if database_url is None:
            settings = get_settings()
            database_url = settings.database_url

        connect_args = {}
        if database_url.startswith("sqlite"):
            # Сессии создаются из разных потоков сервера
            connect_args["check_same_thread"] = False

        self.engine = create_engine(
            database_url,
            pool_pre_ping=True,
            connect_args=connect_args,
            echo=False  # Установить True для отладки SQL запросов
        )

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_tables(self):
        """Создает все таблицы в базе данных."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("Таблицы базы данных созданы успешно")

    def drop_tables(self):
        """Удаляет все таблицы из базы данных."""
        Base.metadata.drop_all(bind=self.engine)
        logger.info("Таблицы базы данных удалены")

    def get_session(self) -> Session:
        """Возвращает новую сессию для работы с БД."""
        return self.SessionLocal()

    def health_check(self) -> bool:
        """Проверяет подключение к базе данных."""
        try:
            with self.get_session() as session:
                session.execute(text("SELECT 1"))
                return True
        except SQLAlchemyError as e:
            logger.error(f"Ошибка подключения к БД: {e}")
            return False

    def dispose(self):
        """Закрывает пул соединений."""
        self.engine.dispose()


class CertificateRepository:
    """Репозиторий для работы с метаданными сертификатов."""

    def __init__(self, db_manager: DatabaseManager):
        """
        Инициализация репозитория.

        Args:
            db_manager: Менеджер базы данных
        """
        self.db_manager = db_manager

    def create_certificate(self, certificate: Certificate) -> Certificate:
        """
        Сохраняет запись сертификата.

        Args:
            certificate: Данные сертификата

        Returns:
            Certificate: Сохраненный сертификат

        Raises:
            StorageError: При ошибке БД
        """
        try:
            with self.db_manager.get_session() as session:
                record = CertificateRecord.from_certificate(certificate)
                session.add(record)
                session.commit()
                return record.to_certificate()
        except SQLAlchemyError as e:
            raise StorageError(f"Ошибка сохранения записи {certificate.id}: {e}")

    def get_certificate_by_id(self, certificate_id: str) -> Optional[Certificate]:
        """
        Получает сертификат по ID.

        Args:
            certificate_id: ID сертификата

        Returns:
            Optional[Certificate]: Сертификат или None
        """
        try:
            with self.db_manager.get_session() as session:
                record = session.get(CertificateRecord, certificate_id)
                return record.to_certificate() if record else None
        except SQLAlchemyError as e:
            raise StorageError(f"Ошибка получения записи {certificate_id}: {e}")

    def list_certificates(self) -> List[Certificate]:
        """
        Получает все сертификаты (сначала новые).

        Returns:
            List[Certificate]: Список сертификатов
        """
        try:
            with self.db_manager.get_session() as session:
                records = session.query(CertificateRecord).order_by(
                    CertificateRecord.uploaded_at.desc()
                ).all()
                return [record.to_certificate() for record in records]
        except SQLAlchemyError as e:
            raise StorageError(f"Ошибка получения списка записей: {e}")

    def get_existing_certificate_ids(self) -> Set[str]:
        """
        Получает множество всех существующих ID сертификатов.

        Returns:
            Set[str]: Множество ID сертификатов
        """
        try:
            with self.db_manager.get_session() as session:
                result = session.query(CertificateRecord.id).all()
                return {row.id for row in result}
        except SQLAlchemyError as e:
            raise StorageError(f"Ошибка получения ID записей: {e}")

    def delete_certificate(self, certificate_id: str) -> bool:
        """
        Удаляет запись сертификата.

        Args:
            certificate_id: ID сертификата

        Returns:
            bool: True если запись удалена, False если не найдена
        """
        try:
            with self.db_manager.get_session() as session:
                record = session.get(CertificateRecord, certificate_id)
                if record is None:
                    return False

                session.delete(record)
                session.commit()
                return True
        except SQLAlchemyError as e:
            raise StorageError(f"Ошибка удаления записи {certificate_id}: {e}")

