#!/usr/bin/env python
"""
Setup rápido para desenvolvimento local.

Este script:
1. Configura Django settings
2. Verifica a conexão com o banco
3. Executa migrations
4. Cria dados de exemplo (opcional, via popular_chamados)

Uso:
    python scripts/quick_setup.py
    python scripts/quick_setup.py --with-sample-data
    python scripts/quick_setup.py --check-only
"""

import os
import sys
import argparse

# Raiz do projeto no path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def setup_django(sqlite: bool = True):
    """Configura Django para uso standalone."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'chamados.config.settings')

    if sqlite:
        # URL não-PostgreSQL: settings cai no SQLite local
        os.environ['DATABASE_URL'] = 'sqlite:///db.sqlite3'

    import django
    django.setup()


def check_connection() -> bool:
    from django.db import DatabaseError, connection

    print("Verificando conexão com o banco...")
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError as e:
        print(f"Erro de conexão: {e}")
        return False

    print("Conexão OK!")
    return True


def run_migrations():
    from django.core.management import call_command

    print("Executando migrations...")
    call_command('migrate', verbosity=1)


def create_sample_data(quantidade: int):
    from django.core.management import call_command

    print("Criando chamados de exemplo...")
    call_command('popular_chamados', quantidade=quantidade)


def show_info():
    from django.conf import settings

    print("\n" + "=" * 60)
    print(f"  Database Engine: {settings.DATABASES['default']['ENGINE']}")
    print(f"  Database Name: {settings.DATABASES['default']['NAME']}")
    print(f"  Event Publisher: {settings.EVENT_PUBLISHER_MODE}")
    print("=" * 60)
    print("\nPróximos passos:")
    print("   1. python manage.py runserver")
    print("   2. Acesse: http://localhost:8000/api/tickets/")
    print("")


def main():
    parser = argparse.ArgumentParser(description='Setup rápido para desenvolvimento')
    parser.add_argument('--with-sample-data', action='store_true', help='Criar dados de exemplo')
    parser.add_argument('--quantidade', type=int, default=10, help='Chamados de exemplo')
    parser.add_argument('--check-only', action='store_true', help='Apenas verificar conexão')
    parser.add_argument('--use-env-database', action='store_true',
                        help='Usar o banco configurado no ambiente em vez do SQLite')

    args = parser.parse_args()

    setup_django(sqlite=not args.use_env_database)

    if not check_connection():
        print("\nCertifique-se de que o banco de dados está rodando.")
        sys.exit(1)

    if args.check_only:
        return

    run_migrations()

    if args.with_sample_data:
        create_sample_data(args.quantidade)

    show_info()


if __name__ == '__main__':
    main()
