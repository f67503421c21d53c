# fanvault/tasks/celery_app.py
from celery import Celery
from fanvault.config.settings import settings

celery_app = Celery('fanvault')

# Конфигурация Celery
celery_app.conf.update(
    broker_url=settings.CELERY_BROKER_URL,
    result_backend=settings.CELERY_RESULT_BACKEND,
    task_serializer='json',
    result_serializer='json',
    accept_content=['json'],
    timezone='UTC',
    enable_utc=True,
    broker_connection_retry_on_startup=True,
)

# Автоматическое обнаружение задач
celery_app.autodiscover_tasks(['fanvault.tasks'])

# Периодические задачи
celery_app.conf.beat_schedule = {
    # ⭐ Подписки и плата платформы
    'expire-subscriptions': {
        'task': 'fanvault.tasks.tasks.expire_subscriptions',
        'schedule': 3600.0,  # Каждый час
    },
    'expire-platform-fees': {
        'task': 'fanvault.tasks.tasks.expire_platform_fees',
        'schedule': 3600.0,
    },

    # 🎨 Заказы контента
    'expire-custom-requests': {
        'task': 'fanvault.tasks.tasks.expire_custom_requests',
        'schedule': 3600.0,
    },

    # 🏦 Выплаты
    'process-payouts': {
        'task': 'fanvault.tasks.tasks.process_payouts',
        'schedule': 900.0,
    },

    # 🧹 Очистка данных
    'cleanup-old-notifications': {
        'task': 'fanvault.tasks.tasks.cleanup_old_notifications',
        'schedule': 86400.0,  # Раз в день (24 часа)
    },
}
