"""
Boxito mascot messages
Purely cosmetic: pages flash one of these after a successful action
"""
import random

COMMON = {
    'motivacion': [
        "¡Tu dedicación hace la diferencia en cada registro! 🌟",
        "¡Boxito valora tu atención al detalle! 🎉",
        "¡Eres parte fundamental del éxito de Shope Envíos! 💼",
        "¡Cada registro cuenta para la excelencia! 📈",
    ],
    'validacion': [
        "¡Datos validados exitosamente! Listos para procesar 🔍",
        "¡Validación completa! Todo está en orden 📋",
        "¡Análisis terminado! Información verificada ✅",
        "¡Boxito certifica: Datos impecables! 🏆",
    ],
    'cargaMasiva': [
        "¡WOW! Carga masiva completada exitosamente 🎊",
        "¡FANTÁSTICO! Todos los registros fueron procesados 💪",
        "¡ÉXITO TOTAL! Carga masiva de nivel profesional ✨",
        "¡BOXITO CELEBRA! Tu eficiencia es excepcional 🎯",
    ],
}

MESSAGES = {
    'directorio': {
        'registro': [
            "¡Excelente! Cliente registrado con éxito ✨",
            "¡Perfecto! Nuevo cliente en el directorio 🎉",
            "¡Genial! Tu directorio crece cada día 🌟",
        ],
        'completado': [
            "¡INCREÍBLE! Expediente completo 🏆",
            "¡PERFECTO! Toda la documentación en orden ✅",
        ],
        'consejos': [
            "💡 Tip: Un expediente completo agiliza la cobranza",
            "⭐ Consejo: Mantén actualizados los contactos de cobro",
        ],
    },
    'comprobantes': {
        'registro': [
            "¡Perfecto! Comprobante registrado con éxito ✨",
            "¡Excelente! Todo salió genial en el registro 🎉",
            "¡Genial! Otro comprobante más en el sistema 🌟",
        ],
        'consejos': [
            "💡 Tip: Mantener links organizados facilita auditorías",
            "⭐ Consejo: Verificar montos ayuda a prevenir errores",
            "📅 Recuerda: Fechas correctas son clave para reportes",
        ],
    },
    'propuestas': {
        'registro': [
            "¡Excelente! Propuesta registrada con éxito ✨",
            "¡Perfecto! Nueva propuesta en el sistema 🎉",
            "¡Genial! Una propuesta más para cerrar negocios 🌟",
        ],
        'consejos': [
            "💡 Tip: Las propuestas claras cierran más ventas",
            "🎯 Meta: Propuestas detalladas generan confianza",
        ],
    },
    'cancelacion_guias': {
        'registro': [
            "¡Perfecto! Solicitud de cancelación registrada ✨",
            "¡Genial! Otra solicitud más en proceso 🌟",
        ],
        'procesada': [
            "¡INCREÍBLE! ¡Cancelación procesada exitosamente! 🎊",
            "¡VICTORIA! ¡Otra guía cancelada sin problemas! 🏆",
        ],
        'estadoActualizado': [
            "¡Estado actualizado correctamente! Todo bajo control 🔄",
            "¡Cambio de estado exitoso! Seguimiento perfecto 📊",
        ],
        'consejos': [
            "💡 Tip: Adjuntar PDF facilita el proceso de cancelación",
            "⭐ Consejo: Detalles claros en el motivo aceleran el trámite",
        ],
    },
    'facturacion': {
        'registro': [
            "¡Excelente! Factura registrada con éxito ✨",
            "¡Perfecto! Tu facturación está impecable 🎉",
        ],
        'pagada': [
            "¡INCREÍBLE! Factura pagada por completo 🏆",
            "¡COBRANZA PERFECTA! Una factura menos por cobrar 💰",
        ],
        'consejos': [
            "💡 Tip: Registrar pagos a tiempo mejora la cobranza",
            "📅 Recuerda: Revisa los vencimientos cada semana",
        ],
    },
}


def pick(page, category):
    """Random message for a page and category, falling back to shared ones"""
    options = MESSAGES.get(page, {}).get(category) or COMMON.get(category)
    if not options:
        return ''
    return random.choice(options)


def completion_badge(porcentaje):
    """Label and css class for a client's completion percentage"""
    porcentaje = float(porcentaje or 0)
    if porcentaje >= 100:
        return 'Completo', 'badge-success'
    if porcentaje >= 80:
        return 'Casi listo', 'badge-info'
    if porcentaje >= 50:
        return 'En progreso', 'badge-warning'
    return 'Incompleto', 'badge-danger'
