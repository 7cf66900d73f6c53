# app.py
"""
Entrypoint da aplicação.

Uso:
  python app.py listar --categoria FIBER --busca azul
  python app.py dashboard
  python app.py importar tintas.xlsx --categoria INK
  python app.py exportar --categoria PACKAGING
  python app.py sessao
"""

from mezanino.adapters.cli import main

if __name__ == "__main__":
    main()
