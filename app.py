"""
Meeting ROI Calculator Web Application
Flask app for meeting cost estimates with a paid savings comparison
"""

import logging
import traceback
from datetime import datetime
from io import BytesIO

import pandas as pd
from flask import Flask, jsonify, redirect, render_template, request, send_file, session

from access_gate import AccessGate, AccessState, SessionAccessStore
from checkout import CheckoutError, StripeCheckoutClient, build_checkout_client
from config import Config
from page_state import Alert, Navigate, calculate, calculator, edit_input, initial_state, run_checkout
from roi_calculator import MeetingInputs

app = Flask(__name__)
app.config.from_object(Config)


def get_access_state() -> AccessState:
    return AccessState(SessionAccessStore(session))


def get_checkout_client():
    """Client used by the page to obtain a checkout redirect URL"""
    if 'checkout_client' not in app.extensions:
        app.extensions['checkout_client'] = build_checkout_client(app.config)
    return app.extensions['checkout_client']


def get_stripe_client():
    """Provider-side client behind /api/checkout"""
    if 'stripe_checkout_client' not in app.extensions:
        app.extensions['stripe_checkout_client'] = StripeCheckoutClient(
            api_key=app.config['STRIPE_SECRET_KEY'],
            app_domain=app.config['APP_DOMAIN'],
        )
    return app.extensions['stripe_checkout_client']


def error_response(e: Exception, status: int = 500):
    app.logger.exception("Request to %s failed", request.path)
    body = {'success': False, 'error': str(e)}
    if app.debug:
        body['trace'] = traceback.format_exc()
    return jsonify(body), status


def state_from_form(form, has_access: bool):
    """Rebuild page state from submitted fields, in field order"""
    state = initial_state(has_access)
    for name in MeetingInputs.FIELD_NAMES:
        if name in form:
            state = edit_input(state, name, form[name])
    return state


def render_page(state, clean_url=None, alert_message=None):
    formatted = state.calculations.formatted() if state.calculations else None
    return render_template(
        'index.html',
        state=state,
        inputs=state.inputs,
        calculations=state.calculations,
        formatted=formatted,
        clean_url=clean_url,
        alert_message=alert_message,
        price_label=app.config['UNLOCK_PRICE_LABEL'],
    )


@app.route('/', methods=['GET'])
def index():
    """Main calculator interface; consumes the payment completion marker"""
    gate = AccessGate(get_access_state())
    result = gate.startup(request.full_path.rstrip('?'))
    clean_url = result.clean_url if result.marker_consumed else None
    return render_page(initial_state(result.unlocked), clean_url=clean_url)


@app.route('/', methods=['POST'])
def calculate_page():
    """Calculate ROI from the submitted form"""
    state = state_from_form(request.form, get_access_state().load())
    return render_page(calculate(state))


@app.route('/checkout', methods=['POST'])
def checkout_page():
    """Start checkout from the unlock button"""
    state = calculate(state_from_form(request.form, get_access_state().load()))
    state, effect = run_checkout(state, get_checkout_client(), app.config['STRIPE_PRICE_ID'])

    if isinstance(effect, Navigate):
        return redirect(effect.url, code=303)
    if isinstance(effect, Alert):
        return render_page(state, alert_message=effect.message)
    return render_page(state)


@app.route('/api/access', methods=['GET'])
def check_access():
    """Report whether the savings comparison is unlocked"""
    try:
        return jsonify({'success': True, 'hasAccess': get_access_state().load()})
    except Exception as e:
        return error_response(e)


@app.route('/api/calculate', methods=['POST'])
def calculate_api():
    """API endpoint for the annual cost calculation"""
    try:
        data = request.get_json(silent=True) or {}

        inputs = calculator.coerce_inputs(data)
        result = calculator.calculate(inputs, get_access_state().load())

        return jsonify({
            'success': True,
            'inputs': inputs.to_dict(),
            'calculations': result.to_dict(),
            'formatted': result.formatted()
        })

    except Exception as e:
        return error_response(e)


@app.route('/api/checkout', methods=['POST'])
def create_checkout_session():
    """Create a hosted checkout session and return its URL"""
    data = request.get_json(silent=True) or {}
    price_id = data.get('priceId')
    if not price_id:
        return jsonify({'success': False, 'error': 'Missing priceId'}), 400

    try:
        url = get_stripe_client().create_session(price_id)
    except CheckoutError as e:
        app.logger.warning("Checkout session creation failed: %s", e)
        return jsonify({'success': False, 'error': str(e)}), 502
    except Exception as e:
        return error_response(e)

    return jsonify({'url': url})


@app.route('/api/download-analysis', methods=['POST'])
def download_analysis():
    """Download the cost analysis as Excel"""
    try:
        data = request.get_json(silent=True) or {}

        inputs = calculator.coerce_inputs(data)
        result = calculator.calculate(inputs, get_access_state().load())

        # Create Excel file in memory
        output = BytesIO()
        with pd.ExcelWriter(output, engine='openpyxl') as writer:
            summary_df = pd.DataFrame(calculator.summary_rows(inputs, result))
            summary_df.to_excel(writer, sheet_name='Summary', index=False)

            worksheet = writer.sheets['Summary']
            for column in worksheet.columns:
                max_length = max(len(str(cell.value)) for cell in column if cell.value is not None)
                worksheet.column_dimensions[column[0].column_letter].width = min(max_length + 2, 40)

        output.seek(0)

        return send_file(
            output,
            mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
            as_attachment=True,
            download_name=f'Meeting_ROI_{datetime.now().strftime("%Y%m%d_%H%M%S")}.xlsx'
        )

    except Exception as e:
        return error_response(e)


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    app.run(debug=True, port=8080)
