from dotenv import load_dotenv

from cvopt.app import create_app
from cvopt.spec.loader import load_server_config


load_dotenv()

# =====================================================================
# GLOBAL VARIABLES
# =====================================================================

config = load_server_config()
app = create_app(config)


if __name__ == "__main__":
    import os
    import uvicorn

    port = int(os.getenv("PORT", "3000"))

    print("\n" + "="*60)
    print(f"Generated documents: {os.path.abspath(config.output_dir)}")
    print(f"Server running on port {port}")
    print("="*60 + "\n")

    uvicorn.run(app, host="0.0.0.0", port=port)
