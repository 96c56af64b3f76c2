"""
CLI интерфейс для хранилища сертификатов
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from client.backends import create_backend
from client.controller import Intent, VaultController
from client.file_reader import SelectedFile
from client.filters import CATEGORY_ALL, category_name, format_date
from client.state import Page
from config.settings import Settings, get_settings
from core.models import Category, Certificate


class ConsoleView:
    """Вывод контроллера в консоль"""

    def __init__(self, output_dir: Path = Path(".")):
        self.output_dir = Path(output_dir)
        self.saved_path: Optional[Path] = None

    def show_toast(self, message: str, kind: str = "success"):
        mark = "✓" if kind == "success" else "✗"
        print(f"{mark} {message}")

    def show_file_preview(self, selected: Optional[SelectedFile]):
        if selected is not None:
            print(f"  Файл: {selected.name} ({selected.size_kb} KB)")

    def show_form_error(self, message: Optional[str]):
        if message:
            print(f"  Ошибка формы: {message}")

    def render(self, certificates: List[Certificate]):
        if not certificates:
            print("  Сертификаты не найдены")
            return

        for cert in certificates:
            print(f"  {cert.id}  {cert.name} ({cert.issuer}), "
                  f"{category_name(cert.category.value)}, {format_date(cert.date)}")

    def ask_delete_confirmation(self, certificate: Certificate):
        print(f"Удалить сертификат «{certificate.name}»? Это действие нельзя отменить.")

    def show_preview(self, certificate: Certificate, source: str):
        print(f"✓ {certificate.name}")
        print(f"  Файл: {certificate.file_name}")
        if source.startswith("data:"):
            print(f"  Расположение: встроенные данные ({len(source)} символов)")
        else:
            print(f"  Расположение: {source}")

    def close_preview(self):
        pass

    def save_file(self, file_name: str, content: bytes):
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.saved_path = self.output_dir / file_name
        self.saved_path.write_bytes(content)
        print(f"  Файл сохранен: {self.saved_path}")

    def navigate(self, page: Page):
        pass


class CertificateCLI:
    """CLI интерфейс для работы с сертификатами"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.setup_logging()

    def setup_logging(self):
        """Настройка логирования"""
        self.settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        logging.basicConfig(
            level=getattr(logging, self.settings.log_level),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[
                logging.FileHandler(self.settings.log_file, encoding='utf-8'),
                logging.StreamHandler()
            ]
        )
        self.logger = logging.getLogger(__name__)

    def create_controller(self, args, backend=None) -> VaultController:
        """Создает контроллер с консольным выводом"""
        if backend is None:
            backend = create_backend(self.settings, local=args.local, api_url=args.api_url)

        view = ConsoleView(Path(getattr(args, 'output', None) or "."))
        return VaultController(
            backend,
            view,
            max_file_size=self.settings.max_file_size,
            read_timeout=self.settings.file_read_timeout
        )

    async def upload_certificate(self, controller: VaultController, args) -> bool:
        """Загрузка сертификата через CLI"""
        if not await controller.dispatch(Intent.SELECT_FILE, args.file):
            return False

        year, _, rest = args.date.partition("-")
        month, _, day = rest.partition("-")

        values = {
            "name": args.name,
            "issuer": args.issuer,
            "category": args.category,
            "month": month,
            "day": day,
            "year": year,
            "notes": args.notes or "",
        }
        for field, value in values.items():
            await controller.dispatch(Intent.EDIT_FIELD, field, value)

        certificate = await controller.dispatch(Intent.SUBMIT)
        if certificate is None:
            return False

        print(f"  ID: {certificate.id}")
        self.logger.info(f"Загружен сертификат {certificate.id}")
        return True

    async def list_certificates(self, controller: VaultController, args) -> bool:
        """Список сертификатов с фильтром и поиском"""
        controller.state.current_filter = args.category
        controller.state.search_term = args.search or ""

        print("Список сертификатов:")
        await controller.dispatch(Intent.NAVIGATE, Page.CERTIFICATES)
        return True

    async def show_certificate(self, controller: VaultController, args) -> bool:
        """Подробная информация о сертификате"""
        certificate = controller.find_certificate(args.certificate_id)
        if certificate is None:
            print(f"✗ Сертификат {args.certificate_id} не найден")
            return False

        print("✓ Сертификат найден:")
        print(f"  ID: {certificate.id}")
        print(f"  Название: {certificate.name}")
        print(f"  Кем выдан: {certificate.issuer}")
        print(f"  Дата: {format_date(certificate.date)}")
        print(f"  Категория: {category_name(certificate.category.value)}")
        if certificate.notes:
            print(f"  Заметки: {certificate.notes}")
        print(f"  Файл: {certificate.file_name}")
        print(f"  Загружен: {certificate.uploaded_at.strftime('%d.%m.%Y %H:%M')}")
        return True

    async def view_certificate(self, controller: VaultController, args) -> bool:
        return await controller.dispatch(Intent.VIEW, args.certificate_id)

    async def download_certificate(self, controller: VaultController, args) -> bool:
        return await controller.dispatch(Intent.DOWNLOAD, args.certificate_id)

    async def delete_certificate(self, controller: VaultController, args) -> bool:
        """Удаление с подтверждением"""
        if not await controller.dispatch(Intent.REQUEST_DELETE, args.certificate_id):
            return False

        confirmed = args.yes or input("Введите 'да' для подтверждения: ").strip().lower() in ("да", "y", "yes")
        if not confirmed:
            await controller.dispatch(Intent.CANCEL_DELETE)
            print("Удаление отменено")
            return True

        return await controller.dispatch(Intent.CONFIRM_DELETE)

    async def run(self, args, backend=None) -> bool:
        """Выполнение команды"""
        commands = {
            'upload': self.upload_certificate,
            'list': self.list_certificates,
            'show': self.show_certificate,
            'view': self.view_certificate,
            'download': self.download_certificate,
            'delete': self.delete_certificate,
        }

        controller = self.create_controller(args, backend)
        try:
            # Кэш нужен всем командам, кроме загрузки; список выводят сами команды
            if args.command != 'upload':
                await controller.refresh(render=False)
            return await commands[args.command](controller, args)
        finally:
            await controller.backend.close()

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description="Хранилище PDF сертификатов",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Примеры использования:
  %(prog)s upload aws.pdf --name "AWS Cert" --issuer Amazon --date 2024-05-10 --category professional
  %(prog)s list --category course --search python
  %(prog)s --local delete 5b1f8f0e-3c56-4f0b-9a7e-3d9b2f1c6a10 --yes
            """
        )
        parser.add_argument('--local', action='store_true', help='Работать без сервера, в локальном хранилище')
        parser.add_argument('--api-url', help='Адрес API сервера')

        subparsers = parser.add_subparsers(dest='command', help='Доступные команды')
        categories = [c.value for c in Category]

        upload_parser = subparsers.add_parser('upload', help='Загрузка нового сертификата')
        upload_parser.add_argument('file', help='Путь к PDF файлу')
        upload_parser.add_argument('--name', required=True, help='Название сертификата')
        upload_parser.add_argument('--issuer', required=True, help='Кем выдан')
        upload_parser.add_argument('--date', required=True, help='Дата выдачи (YYYY-MM-DD)')
        upload_parser.add_argument('--category', required=True, choices=categories, help='Категория')
        upload_parser.add_argument('--notes', help='Заметки')

        list_parser = subparsers.add_parser('list', help='Список сертификатов')
        list_parser.add_argument('--category', default=CATEGORY_ALL, choices=[CATEGORY_ALL] + categories,
                                 help='Фильтр по категории')
        list_parser.add_argument('--search', help='Поиск по названию, издателю и заметкам')

        show_parser = subparsers.add_parser('show', help='Информация о сертификате')
        show_parser.add_argument('certificate_id', help='ID сертификата')

        view_parser = subparsers.add_parser('view', help='Просмотр расположения файла')
        view_parser.add_argument('certificate_id', help='ID сертификата')

        download_parser = subparsers.add_parser('download', help='Скачивание PDF файла')
        download_parser.add_argument('certificate_id', help='ID сертификата')
        download_parser.add_argument('--output', default='.', help='Директория для сохранения')

        delete_parser = subparsers.add_parser('delete', help='Удаление сертификата')
        delete_parser.add_argument('certificate_id', help='ID сертификата')
        delete_parser.add_argument('--yes', action='store_true', help='Не запрашивать подтверждение')

        return parser

    def main(self, argv=None) -> int:
        """Главная функция CLI"""
        parser = self.build_parser()
        args = parser.parse_args(argv)

        if not args.command:
            parser.print_help()
            return 0

        try:
            ok = asyncio.run(self.run(args))
        except Exception as e:
            print(f"✗ Ошибка: {e}")
            self.logger.error(f"Ошибка выполнения команды {args.command}: {e}")
            return 1

        return 0 if ok else 1


def main():
    sys.exit(CertificateCLI().main())


if __name__ == '__main__':
    main()
