# Development server for DocStore using the in-memory backend
from docstore_lib.main import create_app, Config
app = create_app(Config(backend='memory'))
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
