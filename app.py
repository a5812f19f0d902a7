import os

from src.ot_dashboard.ot_dashboard.main import create_app

app = create_app()

if __name__ == '__main__':
    # the reloader would start a second timer loop
    app.run(debug=app.config["DEBUG"], use_reloader=False, port=int(os.getenv("PORT", "8000")))
