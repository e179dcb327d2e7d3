import logging
import time

from flask import Flask, jsonify
from flask_cors import CORS

from climate_config import ClimateConfig
from climate_service import ClimateService
from errors import IncompleteReadingError, TuyaError, UpstreamAuthError

log = logging.getLogger(__name__)


def create_app(config=None, service=None):
    """Build the Flask app. Config comes from the environment unless given.

    Raises ConfigError at startup when credentials or the device id are missing.
    Run under a WSGI server with ``gunicorn 'app:create_app()'``.
    """
    app = Flask(__name__)
    start_time = time.time()

    # ------------- Config -------------
    if service is None:
        config = config or ClimateConfig.from_env()
        service = ClimateService.from_config(config)

    # Allow requests from any origin, preflight included
    CORS(app, origins='*', send_wildcard=True, methods=['GET', 'POST', 'OPTIONS'],
         allow_headers=['Content-Type', 'Authorization'])

    # ------------- Readings API -------------
    @app.route('/')
    @app.route('/api/temp_hum')
    def temp_hum():
        try:
            result = service.get_readings()
        except IncompleteReadingError as e:
            return jsonify(e.payload), 404
        except UpstreamAuthError as e:
            status = e.status_code if e.status_code and e.status_code >= 400 else 502
            return jsonify({
                'error': 'Failed to fetch access token from Tuya API',
                'details': e.details,
            }), status
        except TuyaError as e:
            log.error('[API] Serverless function error: %s', e)
            return jsonify({'error': 'Internal Server Error', 'message': str(e)}), 500
        except Exception as e:
            log.exception('[API] Unexpected error while fetching readings')
            return jsonify({'error': 'Internal Server Error', 'message': str(e)}), 500

        response = jsonify(result.payload)
        response.headers['X-Cache'] = 'HIT' if result.cached else 'MISS'
        return response

    @app.route('/health')
    def health():
        return jsonify({
            'status': 'ok',
            'uptime': round(time.time() - start_time, 1),
            'cache_age': service.cache.age(),
        })

    @app.errorhandler(405)
    def method_not_allowed(_):
        return jsonify({'error': 'Method Not Allowed', 'message': 'Only GET requests are supported.'}), 405

    return app


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    create_app().run()
