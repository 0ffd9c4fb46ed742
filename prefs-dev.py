# Development host for the preferences method channel using in-memory storage
from prefs_lib.config import PreferencesConfig
from prefs_lib.main import create_app
app = create_app(PreferencesConfig(backend='memory', log_level='DEBUG'), setup_logging=True)
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
