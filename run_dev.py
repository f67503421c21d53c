# run_dev.py
import asyncio
import os
import signal
import socket
import subprocess
import sys
import time

import uvicorn

from fanvault.config.settings import settings
from fanvault.database.postgres import create_tables
from fanvault.database.redis_client import redis_manager

REDIS_CONTAINER = "redis-fanvault"


def check_redis_running():
    """Проверяет, доступен ли Redis"""
    try:
        with socket.create_connection((settings.REDIS_HOST, settings.REDIS_PORT), timeout=1):
            return True
    except OSError:
        return False


def start_redis():
    """Запускает Redis в Docker контейнере"""
    print("🔴 Проверка Redis...")

    if check_redis_running():
        print("✅ Redis уже запущен")
        return None

    print("🚀 Запуск Redis в Docker...")
    try:
        redis_container = subprocess.Popen([
            "docker", "run", "-d", "--name", REDIS_CONTAINER,
            "-p", f"{settings.REDIS_PORT}:6379", "redis:7-alpine"
        ], stdout=subprocess.PIPE, stderr=subprocess.PIPE)

        time.sleep(3)

        if check_redis_running():
            print("✅ Redis успешно запущен в Docker")
            return redis_container

        print("❌ Не удалось запустить Redis")
        return None

    except OSError as e:
        print(f"❌ Ошибка запуска Redis: {e}")
        print("💡 Убедитесь, что Docker установлен и запущен")
        return None


async def init_database():
    """Создание таблиц и проверка подключения к Redis"""
    print("🐘 Инициализация базы данных...")

    try:
        await create_tables()
        print("✅ Таблицы созданы (development mode)")

        await redis_manager.init_redis()
        await redis_manager.close_redis()
        print("✅ Redis доступен")
        return True

    except Exception as e:
        print(f"❌ Ошибка инициализации: {e}")
        return False


def start_celery(*args):
    return subprocess.Popen([sys.executable, "-m", "celery", "-A", "fanvault.tasks.celery_app", *args])


def main():
    print("🚀 ЗАПУСК FANVAULT ДЛЯ РАЗРАБОТКИ")
    print("=" * 50)
    print("🌐 API: http://localhost:8000")
    print("📚 Документация: http://localhost:8000/docs")
    print("💳 Платежи: " + ("Stripe" if settings.STRIPE_ENABLED else "симуляция"))
    print("⏹️  Остановка: Ctrl+C")
    print("=" * 50)

    os.environ["ENVIRONMENT"] = "development"

    redis_container = start_redis()
    if not redis_container and not check_redis_running():
        print("❌ Redis не запущен! Realtime и Celery работать не будут")
        print(f"💡 Запустите вручную: docker run -d --name {REDIS_CONTAINER} -p 6379:6379 redis:7-alpine")

    print("🟢 Запуск Celery Worker...")
    celery_worker = start_celery("worker", "--loglevel=info", "--pool=solo")

    print("⏰ Запуск Celery Beat...")
    celery_beat = start_celery("beat", "--loglevel=info")

    def cleanup():
        print("\n🛑 Остановка сервисов...")

        if redis_container:
            subprocess.run(["docker", "stop", REDIS_CONTAINER], capture_output=True)
            subprocess.run(["docker", "rm", REDIS_CONTAINER], capture_output=True)

        celery_worker.terminate()
        celery_beat.terminate()
        print("✅ Все сервисы остановлены")

    def signal_handler(sig, frame):
        print(f"\n📞 Получен сигнал {sig}, завершаем работу...")
        cleanup()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        if not asyncio.run(init_database()):
            print("❌ Ошибка инициализации. Запуск невозможен.")
            cleanup()
            return

        uvicorn.run(
            "main:app",
            host="127.0.0.1",
            port=8000,
            reload=True,
            reload_dirs=["fanvault"],
            log_level="info",
            access_log=True
        )
    except KeyboardInterrupt:
        print("\n\n🛑 Получена команда остановки...")
    finally:
        cleanup()


if __name__ == "__main__":
    main()
