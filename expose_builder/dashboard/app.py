#!/usr/bin/env python3
"""
Exposé Builder Dashboard - Web UI and JSON API for exposé drafts
"""
import io
import logging
from functools import wraps
from pathlib import Path

from flask import Flask, abort, current_app, jsonify, render_template, request, send_file
from werkzeug.utils import secure_filename

from ..api import Config, GeocodingClient, GeocodingError
from ..database.store import DuplicateFileNameError, ExposeStore, ExposeValidationError
from ..export.pdf import render_pdf
from ..images.processor import ImageDecodeError, ImageProcessor
from ..images.watermark import WatermarkStyle
from ..models.expose import OptimizationSettings, normalize_record
from ..models.fields import visible_fields
from ..models.photos import MAX_PHOTOS
from ..services.assembly import RenderFlags, assemble
from ..services.calculator import compute_derived, recompute
from ..services.energy_certificate import JsonCertificateParser, merge_certificate, parse_certificate_safely
from ..services.i18n import field_label, get_language, translate
from ..services.text_generation import apply_generated_texts, generate_texts

LOGGER = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / 'templates'


class RequestError(Exception):
    """Client error reported as JSON with the given status code"""
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


def api_error_handler(f):
    """Decorator to turn domain errors into JSON responses"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except RequestError as e:
            return jsonify({'success': False, 'error': e.message}), e.status_code
        except ExposeValidationError as e:
            message = translate(f"store.{e.field}_required", _lang(), default=e.message)
            return jsonify({'success': False, 'error': message, 'field': e.field}), 400
        except DuplicateFileNameError as e:
            message = translate('store.duplicate_name', _lang())
            return jsonify({'success': False, 'error': message, 'file_name': e.file_name}), 409
        except GeocodingError as e:
            LOGGER.warning("geocoding failed: %s", e.message)
            return jsonify({'success': False, 'error': translate('geocoding.failed', _lang())}), 502
        except Exception:
            LOGGER.exception("unhandled error in %s", request.path)
            return jsonify({'success': False, 'error': translate('errors.internal', _lang())}), 500
    return decorated_function


def _lang() -> str:
    return get_language(request, request.args.get('lang'))


def _store() -> ExposeStore:
    return current_app.extensions['expose_store']


def _processor() -> ImageProcessor:
    return current_app.extensions['image_processor']


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise RequestError(translate('errors.invalid_json', _lang()))
    return data


def _flags_from(data: dict) -> RenderFlags:
    def flag(name, default=True):
        value = data.get(name, default)
        if isinstance(value, str):
            return value.lower() not in ('0', 'false', 'no', 'off')
        return bool(value)

    return RenderFlags(
        include_original_images=flag('include_original_images'),
        show_agent_notices=flag('show_agent_notices'),
        language=_lang(),
        accent_color=data.get('accent_color') or None,
    )


def _export_photos(model) -> dict:
    """Photos as the PDF shows them: watermark and logo burned in"""
    rendered = {}
    for data_uri in model.gallery:
        if data_uri in rendered:
            continue
        try:
            rendered[data_uri] = _processor().export_data_uri(data_uri, model.watermark, model.logo)
        except ImageDecodeError as e:
            LOGGER.warning("photo shown without overlay: %s", e.message)
            rendered[data_uri] = data_uri
    return rendered


def _load_or_404(expose_id: str):
    expose = _store().load(expose_id)
    if expose is None:
        raise RequestError(translate('store.not_found', _lang()), 404)
    return expose


def create_app(test_config: dict = None) -> Flask:
    """
    Build the dashboard application

    Args:
        test_config: Overrides for app.config (DATABASE_URL, GEOCODER, ...)
    """
    app = Flask(__name__, template_folder=str(TEMPLATE_DIR))
    app.config.from_mapping(
        SECRET_KEY=Config.SECRET_KEY,
        DATABASE_URL=Config.DATABASE_URL,
        MAX_CONTENT_LENGTH=64 * 1024 * 1024,
        GEOCODER=None,
    )
    if test_config:
        app.config.update(test_config)

    app.extensions['expose_store'] = ExposeStore(url=app.config['DATABASE_URL'])
    app.extensions['image_processor'] = ImageProcessor()
    app.extensions['geocoder'] = app.config['GEOCODER'] or GeocodingClient()

    register_routes(app)
    return app


def register_routes(app: Flask):

    @app.route('/ping')
    def ping():
        return 'pong', 200

    # ==================== PAGES ====================

    @app.route('/')
    def index():
        lang = _lang()
        exposes = [e.summary() for e in _store().list()]
        return render_template('index.html', exposes=exposes, lang=lang, t=lambda key, **v: translate(key, lang, **v))

    @app.route('/exposes/<expose_id>/preview')
    def preview(expose_id):
        expose = _store().load(expose_id)
        if expose is None:
            abort(404)
        model = assemble(expose.data, expose.photos, theme=request.args.get('theme'), flags=_flags_from(request.args))
        return render_template(
            'preview.html', model=model, expose=expose.summary(), photos=_export_photos(model),
            t=lambda key, **v: translate(key, model.language, **v),
        )

    @app.route('/exposes/<expose_id>/pdf')
    @api_error_handler
    def download_pdf(expose_id):
        expose = _load_or_404(expose_id)
        model = assemble(expose.data, expose.photos, theme=request.args.get('theme'), flags=_flags_from(request.args))
        pdf = render_pdf(model, _processor())
        return send_file(
            io.BytesIO(pdf),
            mimetype='application/pdf',
            as_attachment=True,
            download_name=f"{expose.file_name}.pdf",
        )

    # ==================== DRAFTS API ====================

    @app.route('/api/exposes', methods=['GET'])
    @api_error_handler
    def api_list_exposes():
        return jsonify({'success': True, 'data': [e.summary() for e in _store().list()]})

    @app.route('/api/exposes', methods=['POST'])
    @api_error_handler
    def api_save_expose():
        data = _json_body()
        record = recompute(normalize_record(data.get('data') or {}))
        photos = list(data.get('photos') or [])[:MAX_PHOTOS]
        address = data.get('address') or record.get('adresse', '')

        expose_id = _store().save(data.get('id'), address, data.get('label', ''), record, photos)
        result = {'id': expose_id, 'file_name': _store().generate_file_name(address, data.get('label', ''))}
        return jsonify({'success': True, 'data': result}), 200 if data.get('id') else 201

    @app.route('/api/exposes/<expose_id>', methods=['GET'])
    @api_error_handler
    def api_get_expose(expose_id):
        return jsonify({'success': True, 'data': _load_or_404(expose_id).to_dict()})

    @app.route('/api/exposes/<expose_id>', methods=['DELETE'])
    @api_error_handler
    def api_delete_expose(expose_id):
        if not _store().delete(expose_id):
            raise RequestError(translate('store.not_found', _lang()), 404)
        return jsonify({'success': True, 'message': 'Exposé deleted'})

    @app.route('/api/exposes/<expose_id>/copy', methods=['POST'])
    @api_error_handler
    def api_copy_expose(expose_id):
        data = _json_body()
        new_id = _store().copy(expose_id, data.get('label', ''))
        if new_id is None:
            raise RequestError(translate('store.not_found', _lang()), 404)
        return jsonify({'success': True, 'data': {'id': new_id}}), 201

    # ==================== EDITOR API ====================

    @app.route('/api/recompute', methods=['POST'])
    @api_error_handler
    def api_recompute():
        data = _json_body()
        record = recompute(normalize_record(data.get('record') or {}))
        return jsonify({'success': True, 'data': {'record': record, 'derived': compute_derived(record).to_dict()}})

    @app.route('/api/fields', methods=['GET'])
    @api_error_handler
    def api_fields():
        lang = _lang()
        fields = [{'name': name, 'label': field_label(name, lang)} for name in visible_fields(request.args.get('type'))]
        return jsonify({'success': True, 'data': fields})

    @app.route('/api/photos/optimize', methods=['POST'])
    @api_error_handler
    def api_optimize_photos():
        lang = _lang()
        if request.files:
            files = [(secure_filename(f.filename or '') or 'upload', f.read()) for f in request.files.getlist('photos')]
            form = request.form
        else:
            form = _json_body()
            files = [(f"image_{i + 1}", uri) for i, uri in enumerate(form.get('images') or [])]
        if not files:
            raise RequestError(translate('errors.no_images', lang))

        settings = OptimizationSettings.from_dict(form.get('settings') if isinstance(form.get('settings'), dict)
                                                  else form)
        watermark = None
        if form.get('watermark_text'):
            watermark = WatermarkStyle(text=form['watermark_text'])
        try:
            existing = int(form.get('existing_count') or 0)
        except (TypeError, ValueError):
            existing = 0

        result = _processor().process_batch(files, settings, existing, watermark)
        data = result.to_dict(lang)
        data['assets'] = result.assets
        return jsonify({'success': True, 'data': data})

    @app.route('/api/cover-suggest', methods=['POST'])
    @api_error_handler
    def api_cover_suggest():
        images = _json_body().get('images') or []
        if not images:
            raise RequestError(translate('errors.no_images', _lang()))
        index, scores = _processor().suggest_cover(images)
        return jsonify({'index': index, 'scores': scores})

    @app.route('/api/preview', methods=['POST'])
    @api_error_handler
    def api_preview():
        data = _json_body()
        model = assemble(
            recompute(normalize_record(data.get('record') or {})),
            data.get('photos') or [],
            logo=data.get('logo'),
            theme=data.get('theme'),
            flags=_flags_from(data.get('flags') or {}),
        )
        return jsonify({'success': True, 'data': model.to_dict()})

    @app.route('/api/generate-texts', methods=['POST'])
    @api_error_handler
    def api_generate_texts():
        lang = _lang()
        record = normalize_record(_json_body().get('record') or {})
        coordinates = app.extensions['geocoder'].geocode_or_none(record.get('adresse', ''))
        texts = generate_texts(record, coordinates, lang)
        if texts is None:
            raise RequestError(translate('geocoding.failed', lang), 422)
        return jsonify({'success': True, 'data': {
            'texts': texts.to_dict(),
            'record': recompute(apply_generated_texts(record, texts)),
        }})

    @app.route('/api/energy-certificate', methods=['POST'])
    @api_error_handler
    def api_energy_certificate():
        data = _json_body()
        info = parse_certificate_safely(JsonCertificateParser(), data.get('certificate'))
        if info is None:
            raise RequestError(translate('certificate.failed', _lang()), 422)
        record = recompute(merge_certificate(normalize_record(data.get('record') or {}), info))
        return jsonify({'success': True, 'data': {'record': record, 'certificate': info.to_dict()}})


if __name__ == '__main__':
    from ..main import configure_logging
    configure_logging()
    create_app().run(debug=Config.DEBUG)
