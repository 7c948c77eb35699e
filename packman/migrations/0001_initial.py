"""
Initial migration for Packman models.
"""

from decimal import Decimal
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Packman models: StockEntry, StockMove, Document, DocumentLine, StockAlert."""

    initial = True

    dependencies = [
        ('contenttypes', '0002_remove_content_type_name'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='StockEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('store_code', models.CharField(db_index=True, max_length=50, verbose_name='Loja')),
                ('product_id', models.CharField(max_length=64, verbose_name='Produto')),
                ('_quantity', models.IntegerField(default=0, verbose_name='Quantidade')),
                ('unit_price', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12, verbose_name='Preço unitário')),
                ('currency', models.CharField(default='INR', max_length=3, verbose_name='Moeda')),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Estoque da Loja',
                'verbose_name_plural': 'Estoques das Lojas',
                'ordering': ['store_code', 'product_id'],
            },
        ),
        migrations.CreateModel(
            name='StockMove',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('delta', models.IntegerField(help_text='Positivo = entrada, Negativo = saída', verbose_name='Variação')),
                ('resulting_quantity', models.IntegerField(verbose_name='Saldo resultante')),
                ('reference_id', models.PositiveBigIntegerField(blank=True, null=True, verbose_name='ID da Referência')),
                ('reason', models.CharField(help_text='Obrigatório. Ex: "Romaneio #12", "Venda #123"', max_length=255, verbose_name='Motivo')),
                ('metadata', models.JSONField(blank=True, default=dict, verbose_name='Metadados')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Data/Hora')),
                ('entry', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='moves', to='packman.stockentry', verbose_name='Estoque')),
                ('reference_type', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='contenttypes.contenttype', verbose_name='Tipo de Referência')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Usuário')),
            ],
            options={
                'verbose_name': 'Movimento',
                'verbose_name_plural': 'Movimentos',
                'ordering': ['timestamp', 'pk'],
            },
        ),
        migrations.CreateModel(
            name='Document',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('kind', models.CharField(choices=[('packing_list', 'Romaneio'), ('sales_invoice', 'Nota de Venda')], db_index=True, default='packing_list', max_length=20, verbose_name='Tipo')),
                ('number', models.CharField(blank=True, default='', help_text='Número da caixa ou da nota', max_length=64, verbose_name='Número')),
                ('source_store', models.CharField(db_index=True, max_length=50, verbose_name='Loja de origem')),
                ('destination_store', models.CharField(blank=True, default='', max_length=50, verbose_name='Loja de destino')),
                ('status', models.CharField(choices=[('draft', 'Rascunho'), ('approved', 'Aprovado')], db_index=True, default='draft', max_length=20, verbose_name='Status')),
                ('version', models.PositiveIntegerField(default=1, verbose_name='Versão')),
                ('document_date', models.DateField(blank=True, null=True, verbose_name='Data do documento')),
                ('metadata', models.JSONField(blank=True, default=dict, help_text='Datas de embarque, número da carga, cliente, observações...', verbose_name='Metadados')),
                ('approved_at', models.DateTimeField(blank=True, null=True, verbose_name='Aprovado em')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Criado em')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Atualizado em')),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Aprovado por')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Criado por')),
            ],
            options={
                'verbose_name': 'Documento',
                'verbose_name_plural': 'Documentos',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='DocumentLine',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_id', models.CharField(max_length=64, verbose_name='Produto')),
                ('quantity', models.PositiveIntegerField(verbose_name='Quantidade')),
                ('unit_price', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12, verbose_name='Preço unitário na reserva')),
                ('description', models.CharField(blank=True, default='', max_length=255, verbose_name='Descrição')),
                ('document', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lines', to='packman.document', verbose_name='Documento')),
            ],
            options={
                'verbose_name': 'Item',
                'verbose_name_plural': 'Itens',
                'ordering': ['product_id'],
            },
        ),
        migrations.CreateModel(
            name='StockAlert',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('store_code', models.CharField(max_length=50, verbose_name='Loja')),
                ('product_id', models.CharField(max_length=64, verbose_name='Produto')),
                ('min_quantity', models.PositiveIntegerField(help_text='Alerta dispara quando quantidade < este valor', verbose_name='Quantidade Mínima')),
                ('is_active', models.BooleanField(default=True, verbose_name='Ativo')),
                ('last_triggered_at', models.DateTimeField(blank=True, null=True, verbose_name='Último disparo')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Criado em')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Atualizado em')),
            ],
            options={
                'verbose_name': 'Alerta de Estoque',
                'verbose_name_plural': 'Alertas de Estoque',
            },
        ),
        migrations.AddConstraint(
            model_name='stockentry',
            constraint=models.UniqueConstraint(fields=('store_code', 'product_id'), name='unique_stock_entry_per_store_product'),
        ),
        migrations.AddConstraint(
            model_name='stockentry',
            constraint=models.CheckConstraint(condition=models.Q(('_quantity__gte', 0)), name='stock_entry_quantity_non_negative'),
        ),
        migrations.AddIndex(
            model_name='stockmove',
            index=models.Index(fields=['entry', 'timestamp'], name='packman_move_entry_ts_idx'),
        ),
        migrations.AddIndex(
            model_name='stockmove',
            index=models.Index(fields=['reference_type', 'reference_id'], name='packman_move_reference_idx'),
        ),
        migrations.AddIndex(
            model_name='document',
            index=models.Index(fields=['source_store', 'status'], name='packman_doc_store_status_idx'),
        ),
        migrations.AddConstraint(
            model_name='documentline',
            constraint=models.UniqueConstraint(fields=('document', 'product_id'), name='unique_document_line_per_product'),
        ),
        migrations.AddConstraint(
            model_name='documentline',
            constraint=models.CheckConstraint(condition=models.Q(('quantity__gt', 0)), name='document_line_quantity_positive'),
        ),
        migrations.AddIndex(
            model_name='stockalert',
            index=models.Index(fields=['is_active'], name='packman_alert_active_idx'),
        ),
        migrations.AddConstraint(
            model_name='stockalert',
            constraint=models.UniqueConstraint(fields=('store_code', 'product_id'), name='unique_stock_alert_per_store_product'),
        ),
    ]
